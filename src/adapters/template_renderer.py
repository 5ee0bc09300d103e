"""Render de templates a disco.

Por qué está en adapters:
- Jinja2 y la escritura atómica son detalles de infraestructura.
- El Core solo conoce registros tipados (`StartupScriptParams`, ...) y el
  nombre lógico del template.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from jinja2 import exceptions as jinja_exceptions
from pydantic import BaseModel

from core.domain.errors import MissingPlaceholder, TemplateNotFound, TemplateSyntaxError, WriteError

START_SCRIPT_TEMPLATE = "start.sh.j2"
SERVER_PROPERTIES_TEMPLATE = "server.properties.j2"
EULA_TEMPLATE = "eula.txt.j2"
SERVICE_UNIT_TEMPLATE = "minecraft.service.j2"

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class TemplateRenderer:
    """Rellena templates con un registro tipado y escribe el resultado de forma atómica."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or _TEMPLATES_DIR
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def render_text(self, template_name: str, params: BaseModel) -> str:
        try:
            template = self._env.get_template(template_name)
        except jinja_exceptions.TemplateNotFound as exc:
            raise TemplateNotFound(template_name, f"not found in {self.templates_dir}") from exc
        except jinja_exceptions.TemplateSyntaxError as exc:
            raise TemplateSyntaxError(template_name, f"line {exc.lineno}: {exc.message}") from exc

        try:
            return template.render(**params.model_dump())
        except jinja_exceptions.UndefinedError as exc:
            raise MissingPlaceholder(template_name, str(exc)) from exc

    def render(
        self,
        template_name: str,
        params: BaseModel,
        destination: Path,
        permissions: int,
    ) -> Path:
        """Renderiza `template_name` en `destination` y aplica `permissions`.

        El contenido va primero a un temporal en el mismo directorio y luego se
        hace `os.replace`: un lector nunca ve el archivo a medias.
        """

        content = self.render_text(template_name, params)
        _atomic_write(destination, content, permissions, template_name=template_name)
        return destination


def _atomic_write(destination: Path, content: str, permissions: int, *, template_name: str) -> None:
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=str(destination.parent),
            prefix=f".{destination.name}.",
            suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_name, permissions)
        os.replace(tmp_name, destination)
        tmp_name = None
    except OSError as exc:
        raise WriteError(template_name, f"cannot write {destination}: {exc}") from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
