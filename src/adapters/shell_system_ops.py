"""`SystemOps` real: shell-outs a ufw, useradd/usermod, chown/chmod, sh y systemctl.

Todos los comandos son síncronos y sin timeout: un installer colgado bloquea
la ejecución entera (el caller decide si matar el proceso).
"""

from __future__ import annotations

import logging
import pwd
import subprocess
from pathlib import Path
from typing import Sequence

from core.domain.errors import AccountLookupError, ExternalCommandError
from core.domain.models import AccountIdentity
from core.interfaces.reporter import Reporter

SYSTEMCTL = "systemctl"


class ShellSystemOps:
    def __init__(self, reporter: Reporter) -> None:
        self._reporter = reporter

    def _run(self, command: Sequence[str], *, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        self._reporter.report("command.run", level=logging.DEBUG, command=" ".join(command))
        try:
            result = subprocess.run(
                list(command),
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            # Binario inexistente o no ejecutable: se trata como exit 127.
            raise ExternalCommandError(command, 127, stderr=str(exc)) from exc
        if result.returncode != 0:
            raise ExternalCommandError(
                command,
                result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or "",
            )
        return result

    def open_firewall_port(self, port: int) -> None:
        self._run(["ufw", "allow", str(port)])

    def account_exists(self, name: str) -> bool:
        try:
            pwd.getpwnam(name)
        except KeyError:
            return False
        return True

    def create_account(self, name: str, home: Path, shell: str) -> None:
        self._run(["useradd", "-d", str(home), "-s", shell, name])

    def lookup_account(self, name: str) -> AccountIdentity:
        try:
            entry = pwd.getpwnam(name)
        except KeyError as exc:
            raise AccountLookupError(f"account {name!r} not found in the user database") from exc
        return AccountIdentity(name=entry.pw_name, uid=entry.pw_uid, gid=entry.pw_gid, home=Path(entry.pw_dir))

    def set_home(self, name: str, home: Path) -> None:
        self._run(["usermod", "-d", str(home), name])

    def chown(self, path: Path, owner: str, *, recursive: bool = False) -> None:
        command = ["chown"]
        if recursive:
            command.append("-R")
        self._run([*command, f"{owner}:{owner}", str(path)])

    def chmod(self, path: Path, mode: int, *, recursive: bool = False) -> None:
        command = ["chmod"]
        if recursive:
            command.append("-R")
        # Cinco dígitos: GNU chmod también limpia setuid/setgid/sticky en directorios.
        self._run([*command, f"{mode:05o}", str(path)])

    def run_script(self, script: Path, *, cwd: Path) -> None:
        self._run(["sh", str(script)], cwd=cwd)

    def reload_service_index(self) -> None:
        self._run([SYSTEMCTL, "daemon-reload"])

    def enable_service(self, unit: str) -> None:
        self._run([SYSTEMCTL, "enable", unit])

    def start_service(self, unit: str) -> None:
        self._run([SYSTEMCTL, "start", unit])
