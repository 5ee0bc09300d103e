"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (shell, templates, descargas) lean config de forma
  consistente.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import ExistingAccountPolicy, StepPolicy

SYSTEM_ENV_FILE = Path("/etc/mcprov/mcprov.env")


def _project_root() -> Path:
    # core/config.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="MCPROV_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global del host.
        env_file=(".env", str(SYSTEM_ENV_FILE)),
        env_file_encoding="utf-8",
    )

    servers_root: Path = Field(
        default=Path("/home/servers"),
        description="Raíz de instalaciones: <servers_root>/<user>/<server>.",
    )
    resources_dir: Path = Field(
        default_factory=lambda: _project_root() / "resources",
        description="Directorio con los jars preempaquetados (paper, forge installer, fabric).",
    )
    templates_dir: Path | None = Field(
        default=None,
        description="Directorio alternativo de templates Jinja2 (por defecto los empaquetados).",
    )
    systemd_unit_dir: Path = Field(
        default=Path("/etc/systemd/system"),
        description="Directorio donde se escriben los service units.",
    )
    login_shell: str = Field(
        default="/usr/sbin/nologin",
        min_length=1,
        description="Shell de las cuentas creadas (login deshabilitado).",
    )

    home_mode: int = Field(default=0o750, ge=0, le=0o7777)
    unit_mode: int = Field(default=0o700, ge=0, le=0o7777)
    data_file_mode: int = Field(default=0o644, ge=0, le=0o7777)
    script_mode: int = Field(default=0o755, ge=0, le=0o7777)

    rcon_password_length: int = Field(
        default=24,
        ge=8,
        le=256,
        description="Longitud del password RCON generado.",
    )

    existing_account_policy: ExistingAccountPolicy = Field(
        default=ExistingAccountPolicy.FAIL,
        description="Qué hacer si la cuenta ya existe: 'fail' o 'reuse'.",
    )
    account_lookup_policy: StepPolicy = Field(
        default=StepPolicy.FATAL,
        description="Si resolver el UID tras crear la cuenta es fatal o best-effort.",
    )

    paper_jar_name: str = Field(default="paper.jar", min_length=1)
    forge_installer_name: str = Field(default="forge-installer.jar", min_length=1)
    fabric_launcher_name: str = Field(default="fabric-server-launch.jar", min_length=1)

    paper_download_url: str | None = Field(
        default=None,
        description="URL opcional para descargar paper.jar si no está en resources.",
    )
    forge_installer_url: str | None = Field(
        default=None,
        description="URL opcional del installer de Forge.",
    )
    fabric_launcher_url: str | None = Field(
        default=None,
        description="URL opcional del launcher de Fabric (meta.fabricmc.net).",
    )

    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout por descarga de artefactos (segundos).",
    )
    user_agent: str = Field(
        default="mcprov/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para descargas.",
    )

    log_level: str = Field(default="INFO", description="Nivel de logging (DEBUG, INFO, ...).")
    log_json: bool = Field(default=False, description="Emitir JSON lines en lugar de Rich.")
    log_file: Path | None = Field(default=None, description="Archivo de log adicional.")
