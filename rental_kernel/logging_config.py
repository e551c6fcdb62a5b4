"""
Logging -- one JSON object per log record for the invoicing stack.

Responsibility:
    Renders engine and service log records as single-line JSON. The
    envelope is ``ts``, ``level``, ``logger`` and ``message``, followed by
    the lease and room the current billing call is working on, then the
    record's ``extra=`` fields.

Architecture position:
    Kernel -- imported by every engine and by the lease billing service.
    Depends only on the kernel value objects.

Context:
    ``LogContext.bind(lease_id=..., room_id=...)`` is entered by
    ``LeaseBillingService`` around each operation. Engines never bind;
    their records pick up whatever the service bound.

Rendering:
    Money renders as its whole-VND amount, Period as ``[start, end)``,
    Quantity as ``<value> <unit>``, dates in ISO form and enums by value.
    An attached exception is nested under ``error`` with its ``code`` and
    public attributes, next to the formatted ``traceback``.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from rental_kernel.domain.values import Money, Period, Quantity

_LOGGER_PREFIX = "rental_kernel"

_lease_id: ContextVar[str | None] = ContextVar("rental_log_lease_id", default=None)
_room_id: ContextVar[str | None] = ContextVar("rental_log_room_id", default=None)


class LogContext:
    """Lease and room ids attached to every record emitted inside a billing call."""

    @staticmethod
    @contextmanager
    def bind(
        *,
        lease_id: str | int | None = None,
        room_id: str | int | None = None,
    ) -> Iterator[None]:
        """Bind ids for the duration of the block; ``None`` leaves a field as is."""
        tokens = []
        if lease_id is not None:
            tokens.append((_lease_id, _lease_id.set(str(lease_id))))
        if room_id is not None:
            tokens.append((_room_id, _room_id.set(str(room_id))))
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @staticmethod
    def get_all() -> dict[str, str]:
        ctx = {}
        lease_id = _lease_id.get()
        if lease_id is not None:
            ctx["lease_id"] = lease_id
        room_id = _room_id.get()
        if room_id is not None:
            ctx["room_id"] = room_id
        return ctx

    @staticmethod
    def clear() -> None:
        _lease_id.set(None)
        _room_id.set(None)


# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


def _render(obj: Any) -> Any:
    if isinstance(obj, Money):
        return str(obj.amount)
    if isinstance(obj, (Period, Quantity)):
        return str(obj)
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    return str(obj)


def _error_fields(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
    for key, value in vars(exc).items():
        if not key.startswith("_") and key != "code":
            error[key] = value
    return error


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _error_fields(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_render)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the rental_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_lock = threading.Lock()
_installed: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on the rental_kernel logger. Later calls are no-ops."""
    global _installed
    with _lock:
        if _installed is not None:
            return
        _installed = handler or logging.StreamHandler(stream or sys.stderr)
        _installed.setFormatter(StructuredFormatter())

        root = logging.getLogger(_LOGGER_PREFIX)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_installed)


def reset_logging() -> None:
    """Remove installed handlers and restore propagation. Used by tests."""
    global _installed
    with _lock:
        _installed = None
        root = logging.getLogger(_LOGGER_PREFIX)
        for h in list(root.handlers):
            root.removeHandler(h)
        root.setLevel(logging.WARNING)
        root.propagate = True
