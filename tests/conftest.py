"""Fixtures compartidas: settings aisladas en tmp_path y fakes de los shell-outs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from adapters.template_renderer import TemplateRenderer
from core.config import AppSettings
from core.domain.models import AccountIdentity, EngineVariant, ProvisionRequest, ServerInstallation, build_request


class FakeSystemOps:
    """`SystemOps` en memoria: registra llamadas y permite inyectar fallos por método."""

    def __init__(
        self,
        *,
        existing: tuple[str, ...] = (),
        failures: dict[str, Exception] | None = None,
        on_run_script: Callable[[Path, Path], None] | None = None,
    ) -> None:
        self.calls: list[tuple] = []
        self.existing = set(existing)
        self.failures = dict(failures or {})
        self.on_run_script = on_run_script

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, *args))
        exc = self.failures.get(name)
        if exc is not None:
            raise exc

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def open_firewall_port(self, port: int) -> None:
        self._record("open_firewall_port", port)

    def account_exists(self, name: str) -> bool:
        return name in self.existing

    def create_account(self, name: str, home: Path, shell: str) -> None:
        self._record("create_account", name, home, shell)
        self.existing.add(name)

    def lookup_account(self, name: str) -> AccountIdentity:
        self._record("lookup_account", name)
        return AccountIdentity(name=name, uid=1001, gid=1001, home=Path("/nonexistent"))

    def set_home(self, name: str, home: Path) -> None:
        self._record("set_home", name, home)

    def chown(self, path: Path, owner: str, *, recursive: bool = False) -> None:
        self._record("chown", path, owner, recursive)

    def chmod(self, path: Path, mode: int, *, recursive: bool = False) -> None:
        self._record("chmod", path, mode, recursive)

    def run_script(self, script: Path, *, cwd: Path) -> None:
        self._record("run_script", script, cwd)
        if self.on_run_script is not None:
            self.on_run_script(script, cwd)

    def reload_service_index(self) -> None:
        self._record("reload_service_index")

    def enable_service(self, unit: str) -> None:
        self._record("enable_service", unit)

    def start_service(self, unit: str) -> None:
        self._record("start_service", unit)


class RecordingReporter:
    def __init__(self, events: list | None = None, tags: dict | None = None) -> None:
        self.events: list[tuple[str, int, dict]] = events if events is not None else []
        self.tags = dict(tags or {})

    def report(self, event: str, *, level: int = logging.INFO, **fields: object) -> None:
        self.events.append((event, level, {**self.tags, **fields}))

    def bind(self, **tags: object) -> "RecordingReporter":
        return RecordingReporter(self.events, {**self.tags, **tags})

    def names(self) -> list[str]:
        return [event for event, _, _ in self.events]

    def find(self, name: str) -> list[dict]:
        return [fields for event, _, fields in self.events if event == name]


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    resources = tmp_path / "resources"
    resources.mkdir()
    (resources / "paper.jar").write_bytes(b"paper-jar-bytes")
    (resources / "forge-installer.jar").write_bytes(b"forge-installer-bytes")
    (resources / "fabric-server-launch.jar").write_bytes(b"fabric-launcher-bytes")
    unit_dir = tmp_path / "systemd"
    unit_dir.mkdir()
    return AppSettings(
        _env_file=None,
        servers_root=tmp_path / "servers",
        resources_dir=resources,
        systemd_unit_dir=unit_dir,
    )


@pytest.fixture
def ops() -> FakeSystemOps:
    return FakeSystemOps()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


def make_request(**overrides: object) -> ProvisionRequest:
    raw: dict[str, object] = {
        "user_id": "alice",
        "server_id": "s1",
        "engine": EngineVariant.PAPER,
        "port": 25565,
        "xms": "1G",
        "xmx": "2G",
        "threads": 4,
    }
    raw.update(overrides)
    return build_request(**raw)


@pytest.fixture
def request_factory() -> Callable[..., ProvisionRequest]:
    return make_request


@pytest.fixture
def installation_factory(settings: AppSettings) -> Callable[..., ServerInstallation]:
    def _make(**overrides: object) -> ServerInstallation:
        installation = ServerInstallation.for_request(make_request(**overrides), settings.servers_root)
        installation.root.mkdir(parents=True)
        return installation

    return _make


@pytest.fixture
def make_ops() -> type[FakeSystemOps]:
    return FakeSystemOps
