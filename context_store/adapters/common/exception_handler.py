"""Structured reporting for failures raised by store operations.

Both store errors and raw client exceptions are reduced to the same
dictionary shape so callers (and the JSON log formatter) see one schema.
"""

import json
import logging
import traceback
from pathlib import PurePath
from typing import Any

from ...core.domain.exceptions import ContextStoreError

logger = logging.getLogger(__name__)

FOREIGN_ERROR_CODE = "PYTHON_ERR"


def get_error_code(exc: BaseException) -> str:
    """Store error code, or ``PYTHON_ERR`` for anything else."""
    return exc.error_code if isinstance(exc, ContextStoreError) else FOREIGN_ERROR_CODE


def _foreign_location(exc: BaseException) -> dict[str, Any]:
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if not frames:
        return {"class": "<unknown>", "method": "<unknown>", "file": "<unknown>", "line": 0}
    last = frames[-1]
    return {
        "class": "<unknown>",
        "method": last.name,
        "file": PurePath(last.filename).name,
        "line": last.lineno,
    }


def format_exception_json(
    exc: BaseException,
    include_trace: bool = False,
    extra_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Describe an exception as a JSON-serialisable dict.

    Store errors use their own ``to_dict``; other exceptions get the same
    ``error``/``location`` layout with code ``PYTHON_ERR``.
    """
    if isinstance(exc, ContextStoreError):
        data = exc.to_dict(include_trace=include_trace)
    else:
        data = {
            "error": {"type": type(exc).__name__, "code": FOREIGN_ERROR_CODE, "message": str(exc)},
            "location": _foreign_location(exc),
        }
        if include_trace:
            data["stack_trace"] = [
                line.rstrip()
                for line in traceback.format_exception(type(exc), exc, exc.__traceback__)
                if line.strip()
            ]

    if extra_context:
        data.setdefault("context", {}).update(extra_context)
    return data


def log_exception(
    exc: BaseException,
    log: logging.Logger | None = None,
    level: int = logging.ERROR,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """Log an exception as one JSON document.

    ``operation`` and ``collection`` found in the error's context are also
    attached to the record so the package formatters can show them.
    """
    data = format_exception_json(exc, include_trace=level >= logging.ERROR, extra_context=extra_context)
    context = data.get("context", {})
    record_extra = {key: context[key] for key in ("operation", "collection") if key in context}
    (log or logger).log(level, json.dumps(data, default=str), extra=record_extra)
