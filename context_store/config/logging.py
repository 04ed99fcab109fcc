"""Logging setup for the context store.

All package loggers hang off ``context_store``. Store operations attach
``operation`` and ``collection`` to their records through ``extra``; both
formatters surface them so a failed upsert or search can be traced to the
collection it touched.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from .settings import StoreSettings

ROOT_LOGGER = "context_store"

# Record attributes promoted into every formatted line when present
STORE_FIELDS = ("operation", "collection")

# Chatty client libraries, raised to WARNING unless we are debugging
NOISY_LOGGERS = ("httpx", "httpcore", "grpc", "qdrant_client")


def _store_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in STORE_FIELDS if getattr(record, name, None)}


class JSONLogFormatter(logging.Formatter):
    """One JSON object per line, with store context and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(_store_fields(record))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "code": getattr(exc_value, "error_code", None),
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


class StoreTextFormatter(logging.Formatter):
    """Human-readable lines, suffixed with ``[operation collection]`` when known."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _store_fields(record)
        if fields:
            line = f"{line} [{' '.join(str(v) for v in fields.values())}]"
        return line


def setup_logging(
    settings: StoreSettings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Attach handlers to the package logger.

    Level and format come from ``settings`` (``LOG_LEVEL``, ``LOG_JSON``)
    unless overridden by keyword. Calling it again replaces the handlers.

    Returns:
        The ``context_store`` logger.
    """
    level_name = (level or (settings.log_level if settings else "INFO")).upper()
    use_json = json_format if json_format is not None else bool(settings and settings.log_json)
    numeric_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter: logging.Formatter = JSONLogFormatter() if use_json else StoreTextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return logger
