"""Reporter estructurado sobre `logging`.

Por qué un único logger de proceso:
- Se configura una vez (`setup_logging`) y se inyecta como `LoggingReporter`
  en cada componente; los tags de stage se añaden con `bind`.
- Consola con Rich para operadores, o JSON lines para que el panel de hosting
  pueda ingerir los eventos.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "mcprov"


class JsonLinesFormatter(logging.Formatter):
    """Una línea JSON por evento: time, level, event y campos."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "event": record.getMessage(),
        }
        payload.update(getattr(record, "fields", {}) or {})
        return json.dumps(payload, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "fields", {}) or {}
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        message = record.getMessage()
        return f"{message} {pairs}" if pairs else message


def setup_logging(
    *,
    level: str = "INFO",
    json_lines: bool = False,
    log_file: Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configura el logger `mcprov` (idempotente: reemplaza handlers previos)."""

    logger = logging.getLogger(LOGGER_NAME)
    resolved = logging.getLevelName(level.upper())
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if json_lines:
        stream = logging.StreamHandler()
        stream.setFormatter(JsonLinesFormatter())
        logger.addHandler(stream)
    else:
        rich_handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            markup=False,
            show_path=False,
        )
        rich_handler.setFormatter(KeyValueFormatter())
        logger.addHandler(rich_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JsonLinesFormatter())
        logger.addHandler(file_handler)

    return logger


class LoggingReporter:
    """Implementación de `core.interfaces.reporter.Reporter` sobre `logging`."""

    def __init__(self, logger: logging.Logger | None = None, tags: dict[str, object] | None = None) -> None:
        self._logger = logger or logging.getLogger(LOGGER_NAME)
        self._tags = dict(tags or {})

    def report(self, event: str, *, level: int = logging.INFO, **fields: object) -> None:
        self._logger.log(level, event, extra={"fields": {**self._tags, **fields}})

    def bind(self, **tags: object) -> "LoggingReporter":
        return LoggingReporter(self._logger, {**self._tags, **tags})
