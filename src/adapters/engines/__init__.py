"""Instaladores de engine (uno por variante).

Cada módulo implementa `core.interfaces.engine.EngineInstaller`; el registro
asocia la variante de la request con su clase.
"""

from adapters.engines.base import START_SCRIPT, BaseEngineInstaller
from adapters.engines.fabric import FabricInstaller
from adapters.engines.forge import ForgeInstaller, ForgeInstallPlan, discover_forge_jar
from adapters.engines.paper import PaperInstaller
from core.domain.models import EngineVariant

ENGINE_INSTALLERS: dict[EngineVariant, type[BaseEngineInstaller]] = {
	EngineVariant.PAPER: PaperInstaller,
	EngineVariant.FORGE: ForgeInstaller,
	EngineVariant.FABRIC: FabricInstaller,
}

__all__ = [
	"ENGINE_INSTALLERS",
	"START_SCRIPT",
	"BaseEngineInstaller",
	"FabricInstaller",
	"ForgeInstallPlan",
	"ForgeInstaller",
	"PaperInstaller",
	"discover_forge_jar",
]
