"""Doctor command for host readiness diagnostics."""

from __future__ import annotations

import os
import shutil

import typer
from rich.console import Console
from rich.table import Table

from adapters.template_renderer import (
    EULA_TEMPLATE,
    SERVER_PROPERTIES_TEMPLATE,
    SERVICE_UNIT_TEMPLATE,
    START_SCRIPT_TEMPLATE,
    TemplateRenderer,
)
from core.config import AppSettings
from core.domain.models import EngineVariant
from core.resources_loader import artifact_name, artifact_url

app = typer.Typer(no_args_is_help=True, help="Host diagnostics and configuration checks.")

_console = Console()

REQUIRED_TOOLS = ("ufw", "useradd", "usermod", "chown", "chmod", "systemctl", "sh", "java")


def _check_templates(settings: AppSettings) -> tuple[bool, str]:
    renderer = TemplateRenderer(settings.templates_dir)
    names = (START_SCRIPT_TEMPLATE, SERVER_PROPERTIES_TEMPLATE, EULA_TEMPLATE, SERVICE_UNIT_TEMPLATE)
    missing = [name for name in names if not (renderer.templates_dir / name).is_file()]
    if missing:
        return False, f"missing in {renderer.templates_dir}: {', '.join(missing)}"
    return True, str(renderer.templates_dir)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="mcprov Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    failures = 0

    is_root = os.geteuid() == 0
    table.add_row("Privileges", "OK" if is_root else "FAIL", "root" if is_root else "run provision as root")
    failures += not is_root

    for tool in REQUIRED_TOOLS:
        found = shutil.which(tool)
        table.add_row(f"Tool: {tool}", "OK" if found else "FAIL", found or "not on PATH")
        failures += found is None

    # Rutas del host
    root_parent = settings.servers_root if settings.servers_root.exists() else settings.servers_root.parent
    table.add_row(
        "Servers root",
        "OK" if root_parent.is_dir() else "FAIL",
        str(settings.servers_root),
    )
    unit_dir_ok = settings.systemd_unit_dir.is_dir()
    table.add_row("Unit dir", "OK" if unit_dir_ok else "FAIL", str(settings.systemd_unit_dir))
    failures += not unit_dir_ok

    # Artefactos de engine (opcionales por variante)
    for variant in (EngineVariant.PAPER, EngineVariant.FORGE, EngineVariant.FABRIC):
        path = settings.resources_dir / artifact_name(variant, settings)
        if path.is_file():
            table.add_row(f"Engine: {variant.label}", "OK", str(path))
        elif artifact_url(variant, settings):
            table.add_row(f"Engine: {variant.label}", "DOWNLOAD", "fetched on first use")
        else:
            table.add_row(f"Engine: {variant.label}", "MISSING", f"place {path.name} in {settings.resources_dir}")

    ok_templates, detail_templates = _check_templates(settings)
    table.add_row("Templates", "OK" if ok_templates else "FAIL", detail_templates)
    failures += not ok_templates

    _console.print(table)

    if failures:
        _console.print(
            f"\n[yellow]Note:[/yellow] {failures} check(s) failed; `provision` will stop at the first failing stage."
        )
