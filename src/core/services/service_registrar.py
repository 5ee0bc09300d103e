"""Registro del servidor como service unit de systemd."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from adapters.template_renderer import SERVICE_UNIT_TEMPLATE, TemplateRenderer
from core.config import AppSettings
from core.domain.errors import ProvisioningError, ServiceRegistrationError
from core.domain.models import ServiceUnitParams
from core.interfaces.reporter import Reporter
from core.interfaces.system_ops import SystemOps


class ServiceRegistrar:
    """Escribe el unit, fija dueño/permisos y hace reload, enable y start.

    Cada paso es fatal por separado. Si falla a mitad, el unit puede quedar
    escrito pero sin arrancar; el estado real se consulta con systemctl.
    """

    def __init__(
        self,
        *,
        settings: AppSettings,
        renderer: TemplateRenderer,
        system_ops: SystemOps,
        reporter: Reporter,
    ) -> None:
        self.settings = settings
        self.renderer = renderer
        self.system_ops = system_ops
        self.reporter = reporter.bind(component="service")

    def unit_path(self, params: ServiceUnitParams) -> Path:
        return self.settings.systemd_unit_dir / f"{params.unit_name}.service"

    def register_service(self, user_id: str, server_id: str, working_dir: Path) -> Path:
        params = ServiceUnitParams(user_id=user_id, server_id=server_id, working_dir=working_dir)
        unit_file = self.unit_path(params)
        unit = unit_file.name

        steps: tuple[tuple[str, Callable[[], object]], ...] = (
            (
                "write",
                lambda: self.renderer.render(SERVICE_UNIT_TEMPLATE, params, unit_file, self.settings.unit_mode),
            ),
            ("chown", lambda: self.system_ops.chown(unit_file, user_id)),
            ("reload", self.system_ops.reload_service_index),
            ("enable", lambda: self.system_ops.enable_service(unit)),
            ("start", lambda: self.system_ops.start_service(unit)),
        )
        for step, action in steps:
            try:
                action()
            except ProvisioningError as exc:
                raise ServiceRegistrationError(step, exc) from exc
            self.reporter.report("service.step_completed", step=step, unit=unit)
        return unit_file
