"""CLI principal (Typer).

Por qué Typer:
- Flags tipados y ayuda automática; una request inválida o incompleta se
  rechaza antes de tocar el host.
- Acepta tanto los flags originales (`-userID`, ...) como alias kebab-case.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from adapters.reporting import LoggingReporter, setup_logging
from adapters.shell_system_ops import ShellSystemOps
from cli.doctor import app as doctor_app
from cli.ui_components import build_failure_panel, build_report_panel, build_validation_panel, print_banner
from core.config import AppSettings
from core.domain.errors import ProvisioningFailed, ValidationError
from core.domain.models import build_request
from core.interfaces.reporter import Reporter
from core.services.provisioning import Provisioner

app = typer.Typer(no_args_is_help=True, help="Provision a Minecraft server instance on this host.")
app.add_typer(doctor_app, name="doctor")

_console = Console()


def build_provisioner(settings: AppSettings, reporter: Reporter) -> Provisioner:
    return Provisioner(settings=settings, system_ops=ShellSystemOps(reporter), reporter=reporter)


@app.command()
def provision(
    user_id: str = typer.Option(..., "--user-id", "-userID", help="User ID (also the OS account name)."),
    server_id: str = typer.Option(..., "--server-id", "-userServerID", help="User server ID."),
    server_type: int = typer.Option(
        ..., "--server-type", "-userServerType", help="1=Vanilla/Paper, 2=Forge, 3=Fabric."
    ),
    port: int = typer.Option(..., "--port", "-userServerPort", help="Game port (rcon=port+1, query=port+2)."),
    xms: str = typer.Option(..., "--xms", "-userServerXMS", help="Minimum JVM memory, e.g. 1G."),
    xmx: str = typer.Option(..., "--xmx", "-userServerXMX", help="Maximum JVM memory, e.g. 2G."),
    threads: int = typer.Option(..., "--threads", "-userServerThreads", help="Dedicated CPU threads."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON lines instead of console logs."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default from settings)."),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also append JSON lines to this file."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Skip the banner."),
) -> None:
    """Provision one server: firewall, account, config, engine and service unit."""

    settings = AppSettings()
    setup_logging(
        level=log_level or settings.log_level,
        json_lines=json_logs or settings.log_json,
        log_file=log_file or settings.log_file,
    )

    if not (no_banner or json_logs):
        print_banner(_console)

    try:
        request = build_request(
            user_id=user_id,
            server_id=server_id,
            engine=server_type,
            port=port,
            xms=xms,
            xmx=xmx,
            threads=threads,
        )
    except ValidationError as exc:
        _console.print(build_validation_panel(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    reporter = LoggingReporter()
    try:
        report = build_provisioner(settings, reporter).provision(request)
    except ProvisioningFailed as failure:
        _console.print(build_failure_panel(failure))
        raise typer.Exit(code=failure.exit_code) from failure

    _console.print(build_report_panel(report))


def run() -> None:
    app()
