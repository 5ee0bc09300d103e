"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar paneles en `provision` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import ProvisioningFailed, ValidationError, command_output
from core.domain.models import ProvisionReport


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("mcprov", style="bold cyan")
    subtitle = Text("Minecraft server provisioning • Paper • Forge • Fabric", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_report_panel(report: ProvisionReport) -> Panel:
    """Panel de confirmación con lo que quedó desplegado."""

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", no_wrap=True)
    table.add_column(style="white")
    table.add_row("User", report.user_id if report.uid is None else f"{report.user_id} (uid {report.uid})")
    table.add_row("Server", report.server_id)
    table.add_row("Engine", f"{report.engine} ({report.jar})")
    table.add_row("Path", str(report.root))
    table.add_row("Ports", f"game {report.server_port} • rcon {report.rcon_port} • query {report.query_port}")
    table.add_row("Service", f"{report.unit_name}.service")
    return Panel(table, title=Text("Deployed", style="bold green"), border_style="green")


def build_failure_panel(failure: ProvisioningFailed) -> Panel:
    """Único reporte de fallo de la ejecución: stage, causa y salida del comando."""

    cause = failure.cause
    body = Text()
    body.append("Stage: ", style="bold")
    body.append(f"{failure.stage}\n")
    body.append("Error: ", style="bold")
    body.append(f"{cause.__class__.__name__}: {cause}\n")
    output = command_output(cause)
    if output:
        body.append("\nCommand output:\n", style="bold")
        body.append(output + "\n", style="dim")
    body.append(f"\nExit code: {failure.exit_code}", style="dim")
    return Panel(body, title=Text("Provisioning failed", style="bold red"), border_style="red")


def build_validation_panel(error: ValidationError) -> Panel:
    body = Text(str(error))
    body.append("\nNo changes were made to this host.", style="dim")
    return Panel(body, title=Text("Invalid request", style="bold yellow"), border_style="yellow")
