"""Piezas comunes a los instaladores de engine."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

import httpx

from adapters.template_renderer import START_SCRIPT_TEMPLATE, TemplateRenderer
from core.config import AppSettings
from core.domain.errors import EngineInstallError, ProvisioningError
from core.domain.models import EngineVariant, ServerInstallation, StartupScriptParams
from core.interfaces.reporter import Reporter
from core.interfaces.system_ops import SystemOps
from core.resources_loader import resolve_engine_artifact

START_SCRIPT = "start.sh"


class BaseEngineInstaller:
    """Instalador base: copia de artefactos y render de `start.sh`.

    Las subclases implementan `_install`; cualquier fallo sale como
    `EngineInstallError(variant, cause)`.
    """

    variant: EngineVariant = EngineVariant.PAPER

    def __init__(
        self,
        *,
        settings: AppSettings,
        renderer: TemplateRenderer,
        system_ops: SystemOps,
        reporter: Reporter,
    ) -> None:
        self.settings = settings
        self.renderer = renderer
        self.system_ops = system_ops
        self.reporter = reporter.bind(engine=self.variant.label)

    def install(self, installation: ServerInstallation) -> str:
        try:
            return self._install(installation)
        except EngineInstallError:
            raise
        except (ProvisioningError, OSError) as exc:
            raise EngineInstallError(self.variant.label, exc) from exc

    def _install(self, installation: ServerInstallation) -> str:
        raise NotImplementedError

    def copy_artifact(self, root: Path, target_name: str) -> Path:
        """Copia el artefacto del engine desde resources a `root/target_name`."""

        try:
            source = resolve_engine_artifact(self.variant, self.settings)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EngineInstallError(self.variant.label, f"artifact download failed: {exc}") from exc
        destination = root / target_name
        shutil.copyfile(source, destination)
        os.chmod(destination, self.settings.data_file_mode)
        self.reporter.report("engine.artifact_copied", source=str(source), destination=str(destination))
        return destination

    def write_start_script(
        self,
        installation: ServerInstallation,
        *,
        jar: str,
        option: str = "",
        install_mode: bool = False,
    ) -> Path:
        request = installation.request
        params = StartupScriptParams(
            xms=request.xms,
            xmx=request.xmx,
            threads=request.threads,
            jar=jar,
            option=option,
            install_mode=install_mode,
        )
        script = self.renderer.render(
            START_SCRIPT_TEMPLATE,
            params,
            installation.root / START_SCRIPT,
            self.settings.script_mode,
        )
        self.reporter.report(
            "engine.start_script_written",
            level=logging.DEBUG if install_mode else logging.INFO,
            jar=jar,
            install_mode=install_mode,
        )
        return script
