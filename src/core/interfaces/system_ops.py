"""Capacidad privilegiada del host.

Por qué una interfaz estrecha:
- Firewall, cuentas, permisos y systemd son shell-outs con efectos globales.
  Aislarlos aquí permite probar el state machine contra un fake sin root.
- Cada método falla con `ExternalCommandError` (o `AccountLookupError` en
  `lookup_account`); nunca devuelve códigos de salida.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import AccountIdentity


@runtime_checkable
class SystemOps(Protocol):
    def open_firewall_port(self, port: int) -> None: ...

    def account_exists(self, name: str) -> bool: ...

    def create_account(self, name: str, home: Path, shell: str) -> None: ...

    def lookup_account(self, name: str) -> AccountIdentity: ...

    def set_home(self, name: str, home: Path) -> None: ...

    def chown(self, path: Path, owner: str, *, recursive: bool = False) -> None: ...

    def chmod(self, path: Path, mode: int, *, recursive: bool = False) -> None: ...

    def run_script(self, script: Path, *, cwd: Path) -> None:
        """Ejecuta `sh <script>` en `cwd` y espera sin timeout."""

        ...

    def reload_service_index(self) -> None: ...

    def enable_service(self, unit: str) -> None: ...

    def start_service(self, unit: str) -> None: ...
