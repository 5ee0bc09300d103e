"""Paper (y Vanilla): un jar preempaquetado, una sola fase."""

from __future__ import annotations

from adapters.engines.base import BaseEngineInstaller
from core.domain.models import EngineVariant, ServerInstallation

PAPER_JAR = "paper.jar"


class PaperInstaller(BaseEngineInstaller):
    variant = EngineVariant.PAPER

    def _install(self, installation: ServerInstallation) -> str:
        self.copy_artifact(installation.root, PAPER_JAR)
        self.write_start_script(installation, jar=PAPER_JAR)
        return PAPER_JAR
