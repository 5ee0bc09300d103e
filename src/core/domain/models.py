"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta en el borde (la request llega desde flags) sin
  acoplar el Core a la CLI.
- Los registros tipados (`StartupScriptParams`, `ServiceUnitParams`, ...) son
  el único contexto que reciben los templates: nada de dicts dinámicos.

Nota:
- Estos modelos describen *qué* se provisiona, no *cómo* se ejecuta.
"""

from __future__ import annotations

import re
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.config import ConfigDict

from core.domain.errors import ValidationError

MAX_PORT = 65535
# El puerto de juego reserva dos más (rcon, query).
MAX_GAME_PORT = MAX_PORT - 2

_MEMORY_RE = re.compile(r"^(\d+)([KkMmGg]?)$")
_MEMORY_UNITS = {"": 1, "k": 1024, "m": 1024**2, "g": 1024**3}


class EngineVariant(IntEnum):
    """Implementación de servidor a desplegar (valor numérico de la CLI)."""

    PAPER = 1
    VANILLA = 1
    FORGE = 2
    FABRIC = 3

    @property
    def label(self) -> str:
        return {1: "paper", 2: "forge", 3: "fabric"}[int(self)]


class ProvisionStage(str, Enum):
    """Estados del state machine, en orden."""

    VALIDATED = "validated"
    FIREWALL_OPENED = "firewall_opened"
    HOME_CREATED = "home_created"
    ACCOUNT_READY = "account_ready"
    EULA_ACCEPTED = "eula_accepted"
    CONFIG_WRITTEN = "config_written"
    ENGINE_INSTALLED = "engine_installed"
    SERVICE_REGISTERED = "service_registered"
    DONE = "done"
    FAILED = "failed"

    @property
    def ordinal(self) -> int:
        return list(ProvisionStage).index(self)


class StepPolicy(str, Enum):
    """Clasificación explícita de un paso: fatal o "log and continue"."""

    FATAL = "fatal"
    BEST_EFFORT = "best_effort"


class ExistingAccountPolicy(str, Enum):
    FAIL = "fail"
    REUSE = "reuse"


def memory_to_bytes(value: str) -> int:
    match = _MEMORY_RE.match(value)
    if not match:
        raise ValueError(f"invalid JVM memory size: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _MEMORY_UNITS[unit.lower()]


class ProvisionRequest(BaseModel):
    """Entrada inmutable de una ejecución de provisioning."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: str = Field(
        ...,
        pattern=r"^[a-z_][a-z0-9_-]{0,31}$",
        description="Identificador del dueño; también es el nombre de la cuenta del sistema.",
    )
    server_id: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9_-]{1,64}$",
        description="Identificador de la instancia dentro del hosting del usuario.",
    )
    engine: EngineVariant = Field(
        ...,
        description="Variante de engine (1=Vanilla/Paper, 2=Forge, 3=Fabric).",
    )
    port: int = Field(
        ...,
        ge=1,
        le=MAX_GAME_PORT,
        description="Puerto de juego; rcon y query usan port+1 y port+2.",
    )
    xms: str = Field(..., min_length=1, description="Memoria mínima de la JVM (p.ej. '1G').")
    xmx: str = Field(..., min_length=1, description="Memoria máxima de la JVM (p.ej. '2G').")
    threads: int = Field(..., ge=1, le=1024, description="Threads de CPU dedicados.")

    @field_validator("xms", "xmx")
    @classmethod
    def _check_memory(cls, value: str) -> str:
        memory_to_bytes(value)
        return value

    @model_validator(mode="after")
    def _check_memory_bounds(self) -> "ProvisionRequest":
        if memory_to_bytes(self.xms) > memory_to_bytes(self.xmx):
            raise ValueError(f"xms ({self.xms}) must not exceed xmx ({self.xmx})")
        return self

    @property
    def unit_name(self) -> str:
        return f"{self.user_id}_{self.server_id}"


def build_request(**raw: Any) -> ProvisionRequest:
    """Construye una `ProvisionRequest` traduciendo errores a `ValidationError`."""

    try:
        return ProvisionRequest(**raw)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(problems) from exc


class ServerProperties(BaseModel):
    """Configuración derivada del puerto de juego."""

    server_port: int = Field(..., ge=1, le=MAX_PORT)
    rcon_port: int = Field(..., ge=1, le=MAX_PORT)
    query_port: int = Field(..., ge=1, le=MAX_PORT)
    rcon_password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _check_distinct(self) -> "ServerProperties":
        if len({self.server_port, self.rcon_port, self.query_port}) != 3:
            raise ValueError("server, rcon and query ports must be distinct")
        return self

    @classmethod
    def from_game_port(cls, port: int, *, rcon_password: str) -> "ServerProperties":
        if port < 1 or port + 2 > MAX_PORT:
            raise ValidationError(
                f"game port {port} leaves no room for rcon/query ports (max {MAX_GAME_PORT})"
            )
        return cls(
            server_port=port,
            rcon_port=port + 1,
            query_port=port + 2,
            rcon_password=rcon_password,
        )


class StartupScriptParams(BaseModel):
    xms: str
    xmx: str
    threads: int
    jar: str = Field(..., min_length=1)
    option: str = ""
    install_mode: bool = False


class ServiceUnitParams(BaseModel):
    user_id: str
    server_id: str
    working_dir: Path

    @property
    def unit_name(self) -> str:
        return f"{self.user_id}_{self.server_id}"


class EulaParams(BaseModel):
    accepted: bool = True


class AccountIdentity(BaseModel):
    name: str
    uid: int
    gid: int
    home: Path


class ServerInstallation(BaseModel):
    """Registro de trabajo mutable de una ejecución (no se persiste).

    Lo único que queda en disco son los efectos: home, archivos, unit y usuario.
    """

    model_config = ConfigDict(validate_assignment=True)

    request: ProvisionRequest
    root: Path
    account: AccountIdentity | None = None
    stage: ProvisionStage = ProvisionStage.VALIDATED
    jar: str | None = None
    properties: ServerProperties | None = None
    unit_path: Path | None = None

    @classmethod
    def for_request(cls, request: ProvisionRequest, servers_root: Path) -> "ServerInstallation":
        return cls(request=request, root=servers_root / request.user_id / request.server_id)

    def advance(self, stage: ProvisionStage) -> None:
        """Avanza al siguiente estado; el state machine nunca retrocede."""

        if stage is not ProvisionStage.FAILED and stage.ordinal <= self.stage.ordinal:
            raise ValueError(f"cannot move from {self.stage.value} to {stage.value}")
        self.stage = stage


class ProvisionReport(BaseModel):
    """Confirmación final de un provisioning completo."""

    user_id: str
    server_id: str
    engine: str
    root: Path
    uid: int | None = None
    unit_name: str
    server_port: int
    rcon_port: int
    query_port: int
    jar: str
    stage: ProvisionStage = ProvisionStage.DONE
