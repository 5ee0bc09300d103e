"""Taxonomía de errores del provisioning.

Por qué aquí:
- El Core y los adaptadores lanzan las mismas excepciones de dominio; la CLI
  solo tiene que traducirlas a códigos de salida y a un panel de fallo.
- Cada clase lleva su propio `exit_code`, así cada familia de fallo termina
  el proceso con un código distinto.
"""

from __future__ import annotations

from typing import Sequence


class ProvisioningError(Exception):
    """Base de todos los fallos conocidos del provisioning."""

    exit_code = 1


class ValidationError(ProvisioningError):
    """Request incompleta o inválida (se rechaza antes de cualquier efecto)."""

    exit_code = 2


class EntropyError(ProvisioningError):
    """La fuente de aleatoriedad del sistema no pudo producir un valor."""

    exit_code = 3


class TemplateError(ProvisioningError):
    exit_code = 4

    def __init__(self, template_name: str, message: str) -> None:
        super().__init__(f"{template_name}: {message}")
        self.template_name = template_name


class TemplateNotFound(TemplateError):
    pass


class TemplateSyntaxError(TemplateError):
    pass


class MissingPlaceholder(TemplateError):
    """El template usa un placeholder que los parámetros no definen."""


class WriteError(TemplateError):
    pass


class ExternalCommandError(ProvisioningError):
    """Un comando externo terminó con código distinto de cero."""

    exit_code = 5

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        *,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip() or "no output"
        super().__init__(f"`{' '.join(self.command)}` exited with {returncode}: {detail}")


class EngineInstallError(ProvisioningError):
    exit_code = 6

    def __init__(self, variant: str, cause: Exception | str) -> None:
        self.variant = variant
        self.cause = cause
        super().__init__(f"{variant} install failed: {cause}")


class InstalledArtifactNotFound(EngineInstallError):
    pass


class AccountError(ProvisioningError):
    exit_code = 7


class AccountCreateError(AccountError):
    pass


class AccountLookupError(AccountError):
    pass


class ServiceRegistrationError(ProvisioningError):
    exit_code = 8

    def __init__(self, step: str, cause: Exception | str) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"service {step} failed: {cause}")


class HostSetupError(ProvisioningError):
    """Fallo preparando el host (directorios, rutas) fuera de los comandos externos."""

    exit_code = 9


class ProvisioningFailed(Exception):
    """Estado terminal `Failed(stage, cause)` del state machine."""

    def __init__(self, stage: str, cause: ProvisioningError) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"provisioning failed at {stage}: {cause}")

    @property
    def exit_code(self) -> int:
        return self.cause.exit_code


def command_output(exc: BaseException | None) -> str | None:
    """Devuelve la salida capturada del comando externo que originó `exc`, si hay."""

    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, ExternalCommandError):
            return (exc.stderr or exc.stdout).strip() or None
        cause = getattr(exc, "cause", None)
        exc = cause if isinstance(cause, BaseException) else exc.__cause__
    return None
