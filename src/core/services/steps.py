"""Ejecución de pasos con política explícita (fatal / best-effort)."""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from core.domain.errors import ProvisioningError
from core.domain.models import StepPolicy
from core.interfaces.reporter import Reporter

T = TypeVar("T")


def attempt(
    reporter: Reporter,
    step: str,
    policy: StepPolicy,
    action: Callable[[], T],
) -> T | None:
    """Ejecuta `action`; con `BEST_EFFORT` un fallo se reporta y se devuelve None."""

    try:
        return action()
    except ProvisioningError as exc:
        if policy is StepPolicy.FATAL:
            raise
        reporter.report(
            "step.skipped",
            level=logging.WARNING,
            step=step,
            error=exc.__class__.__name__,
            detail=str(exc),
        )
        return None
