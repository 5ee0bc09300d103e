"""Fabric: launcher de servidor que se auto-instala en el primer arranque."""

from __future__ import annotations

from adapters.engines.base import BaseEngineInstaller
from core.domain.models import EngineVariant, ServerInstallation

FABRIC_LAUNCHER_JAR = "fabric-server-launch.jar"


class FabricInstaller(BaseEngineInstaller):
    variant = EngineVariant.FABRIC

    def _install(self, installation: ServerInstallation) -> str:
        self.copy_artifact(installation.root, FABRIC_LAUNCHER_JAR)
        self.write_start_script(installation, jar=FABRIC_LAUNCHER_JAR, option="nogui")
        return FABRIC_LAUNCHER_JAR
