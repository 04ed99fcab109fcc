"""Root of the context store exception hierarchy.

Every error knows its code, the place it was raised from, the exception
that caused it (if any) and a free-form context dict. Store operations put
``collection`` and ``operation`` in that dict.
"""

import inspect
import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import PurePath
from types import FrameType
from typing import Any

# Frames belonging to exception construction, skipped when locating the raise site
_CONSTRUCTION_FRAMES = frozenset({"__init__", "_raise_site", "from_frame"})


@dataclass(frozen=True)
class RaiseSite:
    """Where an error was constructed."""

    class_name: str
    method_name: str
    file_name: str
    line_number: int
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def from_frame(cls, frame: FrameType | None) -> "RaiseSite":
        while frame is not None and frame.f_code.co_name in _CONSTRUCTION_FRAMES:
            frame = frame.f_back
        if frame is None:
            return cls("<unknown>", "<unknown>", "<unknown>", 0)
        owner = frame.f_locals.get("self")
        return cls(
            class_name=type(owner).__name__ if owner is not None else "<module>",
            method_name=frame.f_code.co_name,
            file_name=PurePath(frame.f_code.co_filename).name,
            line_number=frame.f_lineno,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "class": self.class_name,
            "method": self.method_name,
            "file": self.file_name,
            "line": self.line_number,
            "timestamp": self.timestamp,
        }


class ContextStoreError(Exception):
    """Base exception for all context store errors.

    Args:
        message: Human-readable description.
        cause: Exception that triggered this one, typically a client error.
        context: Diagnostic key/value pairs such as ``collection``.
    """

    error_code: str = "CTX_ERR_001"

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.extra_context = dict(context or {})
        self.location = self._raise_site()
        self.stack_trace = (
            "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
            if cause is not None
            else None
        )

    def _raise_site(self) -> RaiseSite:
        return RaiseSite.from_frame(inspect.currentframe())

    @property
    def collection(self) -> str | None:
        return self.extra_context.get("collection")

    @property
    def operation(self) -> str | None:
        return self.extra_context.get("operation")

    def to_dict(self, include_trace: bool = False) -> dict[str, Any]:
        """JSON-ready description: ``error``, ``location`` and, when set,
        ``context``, ``cause`` and ``stack_trace`` (the cause's traceback)."""
        data: dict[str, Any] = {
            "error": {"type": type(self).__name__, "code": self.error_code, "message": self.message},
            "location": self.location.to_dict(),
        }
        if self.extra_context:
            data["context"] = dict(self.extra_context)
        if self.cause is not None:
            data["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        if include_trace and self.stack_trace:
            data["stack_trace"] = [line for line in self.stack_trace.splitlines() if line.strip()]
        return data
