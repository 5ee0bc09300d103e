"""Contrato de instaladores de engine.

Por qué Protocol:
- Paper, Forge y Fabric comparten la misma forma (dejar un jar ejecutable y
  un `start.sh`), pero con fases distintas. El orquestador solo ve `install`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ServerInstallation


@runtime_checkable
class EngineInstaller(Protocol):
    """Lleva un engine a estado ejecutable dentro de `installation.root`."""

    def install(self, installation: ServerInstallation) -> str:
        """Instala el engine y devuelve el nombre del jar final referenciado por `start.sh`."""

        ...
