"""Forge: instalación en dos fases.

Fase 1 (installer): copia el installer, genera un `start.sh` en modo
`--installServer` y lo ejecuta. Fase 2 (finalize): solo si la fase 1 salió con
código 0; localiza el jar producido, borra los artefactos del installer y
genera el `start.sh` definitivo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from adapters.engines.base import START_SCRIPT, BaseEngineInstaller
from core.domain.errors import EngineInstallError, InstalledArtifactNotFound
from core.domain.models import EngineVariant, ServerInstallation, StepPolicy
from core.services.steps import attempt


@dataclass(frozen=True)
class ForgeInstallPlan:
    """Datos de las dos fases: nombres, patrón de búsqueda y lista de limpieza."""

    installer_name: str = "installer.jar"
    install_option: str = "--installServer"
    run_option: str = ""
    jar_pattern: str = "forge*.jar"
    exclude_marker: str = "installer"
    cleanup: tuple[str, ...] = ("installer.jar", "installer.jar.log", "run.bat", "run.sh", START_SCRIPT)


DEFAULT_PLAN = ForgeInstallPlan()


def discover_forge_jar(root: Path, plan: ForgeInstallPlan = DEFAULT_PLAN) -> list[str]:
    """Candidatos a jar de servidor en `root`, ordenados.

    Regla de desempate: se excluyen los nombres que contienen `installer` y se
    ordena lexicográficamente por nombre; el primero es el elegido.
    """

    return sorted(
        path.name
        for path in root.glob(plan.jar_pattern)
        if path.is_file() and plan.exclude_marker not in path.name.lower()
    )


class ForgeInstaller(BaseEngineInstaller):
    variant = EngineVariant.FORGE

    def __init__(self, *args, plan: ForgeInstallPlan = DEFAULT_PLAN, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.plan = plan

    @property
    def phases(self) -> tuple[tuple[str, Callable[[ServerInstallation], str | None]], ...]:
        return (("installer", self._run_installer), ("finalize", self._finalize))

    def _install(self, installation: ServerInstallation) -> str:
        jar: str | None = None
        for name, phase in self.phases:
            self.reporter.report("forge.phase_started", phase=name)
            jar = phase(installation) or jar
            self.reporter.report("forge.phase_completed", phase=name)
        if jar is None:
            raise InstalledArtifactNotFound(self.variant.label, "finalize phase produced no jar")
        return jar

    def _run_installer(self, installation: ServerInstallation) -> None:
        root = installation.root
        self.copy_artifact(root, self.plan.installer_name)
        script = self.write_start_script(
            installation,
            jar=self.plan.installer_name,
            option=self.plan.install_option,
            install_mode=True,
        )
        self.system_ops.run_script(script, cwd=root)

    def _finalize(self, installation: ServerInstallation) -> str:
        root = installation.root
        candidates = discover_forge_jar(root, self.plan)
        if not candidates:
            raise InstalledArtifactNotFound(
                self.variant.label,
                f"no file matching {self.plan.jar_pattern} in {root}",
            )
        jar = candidates[0]
        if len(candidates) > 1:
            self.reporter.report(
                "forge.multiple_jars",
                level=logging.WARNING,
                candidates=",".join(candidates),
                selected=jar,
            )
        self.reporter.report("forge.jar_found", jar=jar)

        for name in self.plan.cleanup:
            attempt(self.reporter, f"cleanup:{name}", StepPolicy.BEST_EFFORT, lambda n=name: self._remove(root / n))

        self.write_start_script(installation, jar=jar, option=self.plan.run_option)
        return jar

    def _remove(self, path: Path) -> None:
        if not path.exists():
            self.reporter.report("forge.cleanup_absent", level=logging.DEBUG, path=str(path))
            return
        try:
            path.unlink()
        except OSError as exc:
            raise EngineInstallError(self.variant.label, f"cannot remove {path.name}: {exc}") from exc
        self.reporter.report("forge.cleanup_removed", path=str(path))
