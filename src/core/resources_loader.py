"""Resolución de artefactos de engine.

Este módulo vive en `core/` porque:
- centraliza el *qué* artefacto necesita cada engine (paper.jar, installer de
  Forge, launcher de Fabric) sin acoplarse a los instaladores
- evita duplicar lógica de paths/descarga en adaptadores.

No incluye jars en el repo; se dejan en `resources/` o se descargan una vez
(si hay URL configurada) y quedan cacheados ahí.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from core.config import AppSettings
from core.domain.models import EngineVariant


def artifact_name(variant: EngineVariant, settings: AppSettings) -> str:
    if variant is EngineVariant.FORGE:
        return settings.forge_installer_name
    if variant is EngineVariant.FABRIC:
        return settings.fabric_launcher_name
    return settings.paper_jar_name


def artifact_url(variant: EngineVariant, settings: AppSettings) -> str | None:
    if variant is EngineVariant.FORGE:
        return settings.forge_installer_url
    if variant is EngineVariant.FABRIC:
        return settings.fabric_launcher_url
    return settings.paper_download_url


def resolve_engine_artifact(variant: EngineVariant, settings: AppSettings) -> Path:
    """Devuelve la ruta local del artefacto de `variant`.

    Lógica:
    - Si existe en `resources_dir`, se usa tal cual.
    - Si no existe y hay URL configurada, se descarga y queda cacheado.
    - Si no hay ni archivo ni URL, `FileNotFoundError`.

    Un fallo de descarga no deja el `.part` a medio escribir en `resources_dir`.
    """

    out_path = settings.resources_dir / artifact_name(variant, settings)
    if out_path.is_file():
        return out_path

    url = artifact_url(variant, settings)
    if not url:
        raise FileNotFoundError(f"{out_path} not found and no download URL configured")

    settings.resources_dir.mkdir(parents=True, exist_ok=True)
    partial = out_path.with_name(out_path.name + ".part")
    try:
        with httpx.stream(
            "GET",
            url,
            timeout=settings.http_timeout_seconds,
            headers={"User-Agent": settings.user_agent, "Accept": "application/java-archive, */*"},
            follow_redirects=True,
        ) as resp:
            resp.raise_for_status()
            with partial.open("wb") as fh:
                for chunk in resp.iter_bytes():
                    fh.write(chunk)
        partial.replace(out_path)
    finally:
        partial.unlink(missing_ok=True)
    return out_path
