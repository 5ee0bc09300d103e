"""Contrato del reporter estructurado.

Por qué Protocol:
- El Core solo necesita `report(event, **fields)`; no sabe si detrás hay
  Rich, JSON lines o una lista en memoria (tests).
- Se inyecta en cada componente al construirlo, con tags por stage.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class Reporter(Protocol):
    """Emisor de eventos estructurados."""

    def report(self, event: str, *, level: int = logging.INFO, **fields: object) -> None:
        """Emite `event` con los campos dados más los tags ya asociados."""

        ...

    def bind(self, **tags: object) -> "Reporter":
        """Devuelve un reporter hijo que añade `tags` a cada evento."""

        ...
