"""Provisioning orchestration.

This module owns the state machine of a single provisioning run. The CLI only
builds a `ProvisionRequest`, calls `Provisioner.provision` and renders the
result; every side effect goes through the injected collaborators
(`SystemOps`, `TemplateRenderer`, engine installers) so the sequence can be
exercised end-to-end against fakes.

Known limitations:
- No locking: two runs for the same user/server pair must not be started at
  the same time by the caller.
- No timeouts on shell-outs: a hung Forge installer stalls the run until the
  process is killed externally, and nothing is cleaned up after a kill.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from adapters.engines import ENGINE_INSTALLERS
from adapters.template_renderer import EULA_TEMPLATE, SERVER_PROPERTIES_TEMPLATE, TemplateRenderer
from core.config import AppSettings
from core.domain.errors import HostSetupError, ProvisioningError, ProvisioningFailed, command_output
from core.domain.models import (
    EngineVariant,
    EulaParams,
    ProvisionReport,
    ProvisionRequest,
    ProvisionStage,
    ServerInstallation,
    ServerProperties,
    build_request,
)
from core.interfaces.engine import EngineInstaller
from core.interfaces.reporter import Reporter
from core.interfaces.system_ops import SystemOps
from core.services import secret_generator
from core.services.accounts import AccountManager
from core.services.service_registrar import ServiceRegistrar

Handler = Callable[[ServerInstallation, Reporter], None]
InstallerFactory = Callable[..., EngineInstaller]


class Provisioner:
    """Runs the provisioning stages strictly in order, stopping at the first failure."""

    def __init__(
        self,
        *,
        settings: AppSettings,
        system_ops: SystemOps,
        reporter: Reporter,
        renderer: TemplateRenderer | None = None,
        installers: Mapping[EngineVariant, InstallerFactory] | None = None,
        generate_secret: Callable[[int], str] = secret_generator.generate,
    ) -> None:
        self.settings = settings
        self.system_ops = system_ops
        self.reporter = reporter
        self.renderer = renderer or TemplateRenderer(settings.templates_dir)
        self.installers = installers or ENGINE_INSTALLERS
        self.generate_secret = generate_secret
        self.accounts = AccountManager(settings=settings, system_ops=system_ops, reporter=reporter)
        self.registrar = ServiceRegistrar(
            settings=settings,
            renderer=self.renderer,
            system_ops=system_ops,
            reporter=reporter,
        )

    @property
    def transitions(self) -> tuple[tuple[ProvisionStage, Handler], ...]:
        return (
            (ProvisionStage.FIREWALL_OPENED, self._open_firewall),
            (ProvisionStage.HOME_CREATED, self._create_home),
            (ProvisionStage.ACCOUNT_READY, self._prepare_account),
            (ProvisionStage.EULA_ACCEPTED, self._accept_eula),
            (ProvisionStage.CONFIG_WRITTEN, self._write_config),
            (ProvisionStage.ENGINE_INSTALLED, self._install_engine),
            (ProvisionStage.SERVICE_REGISTERED, self._register_service),
            (ProvisionStage.DONE, self._finish),
        )

    def provision(self, request: ProvisionRequest | Mapping[str, Any]) -> ProvisionReport:
        try:
            if not isinstance(request, ProvisionRequest):
                request = build_request(**request)
        except ProvisioningError as exc:
            self._report_failure(ProvisionStage.VALIDATED, exc)
            raise ProvisioningFailed(ProvisionStage.VALIDATED.value, exc) from exc

        installation = ServerInstallation.for_request(request, self.settings.servers_root)
        self.reporter.report(
            "provision.validated",
            stage=ProvisionStage.VALIDATED.value,
            user=request.user_id,
            server=request.server_id,
            engine=request.engine.label,
            port=request.port,
            root=str(installation.root),
        )

        for stage, handler in self.transitions:
            stage_reporter = self.reporter.bind(stage=stage.value)
            try:
                handler(installation, stage_reporter)
            except ProvisioningError as exc:
                installation.advance(ProvisionStage.FAILED)
                self._report_failure(stage, exc)
                raise ProvisioningFailed(stage.value, exc) from exc
            installation.advance(stage)
            stage_reporter.report("provision.stage_completed", level=logging.DEBUG)

        return self._build_report(installation)

    def _report_failure(self, stage: ProvisionStage, exc: ProvisioningError) -> None:
        self.reporter.report(
            "provision.failed",
            level=logging.ERROR,
            stage=stage.value,
            error=exc.__class__.__name__,
            detail=str(exc),
            output=command_output(exc),
            exit_code=exc.exit_code,
        )

    def _open_firewall(self, installation: ServerInstallation, reporter: Reporter) -> None:
        port = installation.request.port
        self.system_ops.open_firewall_port(port)
        reporter.report("firewall.opened", port=port)

    def _create_home(self, installation: ServerInstallation, reporter: Reporter) -> None:
        try:
            installation.root.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            raise HostSetupError(f"cannot create {installation.root}: {exc}") from exc
        reporter.report("home.created", path=str(installation.root))

    def _prepare_account(self, installation: ServerInstallation, reporter: Reporter) -> None:
        installation.account = self.accounts.ensure_account(installation.request.user_id, installation.root)

    def _accept_eula(self, installation: ServerInstallation, reporter: Reporter) -> None:
        path = self.renderer.render(
            EULA_TEMPLATE,
            EulaParams(accepted=True),
            installation.root / "eula.txt",
            self.settings.data_file_mode,
        )
        reporter.report("eula.written", path=str(path))

    def _write_config(self, installation: ServerInstallation, reporter: Reporter) -> None:
        properties = ServerProperties.from_game_port(
            installation.request.port,
            rcon_password=self.generate_secret(self.settings.rcon_password_length),
        )
        path = self.renderer.render(
            SERVER_PROPERTIES_TEMPLATE,
            properties,
            installation.root / "server.properties",
            self.settings.data_file_mode,
        )
        installation.properties = properties
        reporter.report(
            "config.written",
            path=str(path),
            server_port=properties.server_port,
            rcon_port=properties.rcon_port,
            query_port=properties.query_port,
        )

    def _install_engine(self, installation: ServerInstallation, reporter: Reporter) -> None:
        variant = installation.request.engine
        factory = self.installers[variant]
        installer = factory(
            settings=self.settings,
            renderer=self.renderer,
            system_ops=self.system_ops,
            reporter=reporter,
        )
        installation.jar = installer.install(installation)
        # Installers run as root; hand everything they created to the account.
        self.accounts.apply_ownership(installation.root, installation.request.user_id)
        reporter.report("engine.installed", engine=variant.label, jar=installation.jar)

    def _register_service(self, installation: ServerInstallation, reporter: Reporter) -> None:
        request = installation.request
        installation.unit_path = self.registrar.register_service(
            request.user_id,
            request.server_id,
            installation.root,
        )
        reporter.report("service.registered", unit=installation.unit_path.name)

    def _finish(self, installation: ServerInstallation, reporter: Reporter) -> None:
        account = installation.account
        reporter.report(
            "provision.done",
            user=installation.request.user_id,
            uid=account.uid if account else "unknown",
            unit=installation.unit_path.name if installation.unit_path else None,
            port=installation.request.port,
        )

    def _build_report(self, installation: ServerInstallation) -> ProvisionReport:
        request = installation.request
        properties = installation.properties
        assert properties is not None and installation.jar is not None
        return ProvisionReport(
            user_id=request.user_id,
            server_id=request.server_id,
            engine=request.engine.label,
            root=installation.root,
            uid=installation.account.uid if installation.account else None,
            unit_name=request.unit_name,
            server_port=properties.server_port,
            rcon_port=properties.rcon_port,
            query_port=properties.query_port,
            jar=installation.jar,
            stage=installation.stage,
        )
