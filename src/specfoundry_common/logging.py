"""Structured logging helpers with correlation IDs.

Library modules obtain a :class:`LoggerAdapter` via :func:`get_logger`; the
adapter injects ``operation``, ``status`` and ``correlation_id`` fields into
every record. Handlers are only configured at the application boundary via
:func:`setup_logging` (the CLI does this once per invocation).

Examples
--------
>>> from specfoundry_common.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.debug("Model spec generated", extra={"operation": "generate", "root": "Order"})
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from collections.abc import Mapping, MutableMapping
    from types import TracebackType

__all__ = [
    "CorrelationContext",
    "JsonFormatter",
    "LoggerAdapter",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
    "setup_logging",
    "with_fields",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "specfoundry_correlation_id", default=None
)

_STRUCTURED_FIELDS = ("correlation_id", "operation", "status", "duration_ms")

# Attributes present on every LogRecord; never copied into the JSON payload.
_RECORD_ATTRIBUTES = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The payload carries ``ts``, ``level``, ``name`` and ``message`` followed by
    the structured fields and any JSON-compatible ``extra`` values.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Return ``record`` encoded as JSON."""
        data: dict[str, object] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in _STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value

        if "correlation_id" not in data:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                data["correlation_id"] = ctx_correlation_id

        for key, value in record.__dict__.items():
            if (
                key not in _RECORD_ATTRIBUTES
                and key not in data
                and not key.startswith("_")
                and value is not None
                and isinstance(value, (str, int, float, bool, list, dict))
            ):
                data[key] = value

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class LoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Logger adapter that injects structured context fields.

    Fields bound at construction (see :func:`with_fields`) are merged into the
    ``extra`` mapping of each call without overriding per-call values. When no
    ``operation`` or ``status`` is supplied, ``operation`` defaults to
    ``"unknown"`` and ``status`` is inferred from the log level.
    """

    def process(
        self, msg: object, kwargs: MutableMapping[str, Any]
    ) -> tuple[object, MutableMapping[str, Any]]:
        """Merge bound fields and the context correlation ID into ``extra``."""
        extra = kwargs.setdefault("extra", {})
        if self.extra:
            for key, value in self.extra.items():
                extra.setdefault(key, value)

        if "correlation_id" not in extra:
            ctx_correlation_id = _correlation_id.get()
            if ctx_correlation_id is not None:
                extra["correlation_id"] = ctx_correlation_id

        extra.setdefault("operation", "unknown")
        return msg, kwargs

    def log(self, level: int, msg: object, *args: object, **kwargs: Any) -> None:
        """Log ``msg`` at ``level`` with a status inferred from the level."""
        if self.isEnabledFor(level):
            extra = kwargs.setdefault("extra", {})
            if "status" not in extra:
                if level >= logging.ERROR:
                    extra["status"] = "error"
                elif level >= logging.WARNING:
                    extra["status"] = "warning"
                else:
                    extra["status"] = "success"
            msg, kwargs = self.process(msg, kwargs)
            self.logger.log(level, msg, *args, **kwargs)


def get_logger(name: str) -> LoggerAdapter:
    """Return a structured logger adapter for ``name``.

    A ``NullHandler`` is attached when the underlying logger has no handlers so
    library use never emits "no handler" warnings.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return LoggerAdapter(logger, {})


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger with :class:`JsonFormatter` on stderr.

    Call once at application startup. ``level`` accepts either a numeric level
    or a level name such as ``"DEBUG"``.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str | None:
    """Return the correlation ID for the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """Context manager that scopes a correlation ID.

    Examples
    --------
    >>> with CorrelationContext("req-123"):
    ...     assert get_correlation_id() == "req-123"
    """

    def __init__(self, correlation_id: str | None) -> None:
        self._correlation_id = correlation_id
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> Self:
        self._token = _correlation_id.set(self._correlation_id)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None


class _WithFieldsContext(AbstractContextManager[LoggerAdapter]):
    def __init__(self, logger: logging.Logger | LoggerAdapter, fields: Mapping[str, object]) -> None:
        self._base = logger.logger if isinstance(logger, LoggerAdapter) else logger
        self._fields = dict(fields)
        correlation_id = self._fields.get("correlation_id")
        self._correlation = (
            CorrelationContext(str(correlation_id)) if correlation_id is not None else None
        )

    def __enter__(self) -> LoggerAdapter:
        if self._correlation is not None:
            self._correlation.__enter__()
        return LoggerAdapter(self._base, self._fields)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._correlation is not None:
            self._correlation.__exit__(exc_type, exc_value, exc_tb)


def with_fields(
    logger: logging.Logger | LoggerAdapter,
    **fields: object,
) -> AbstractContextManager[LoggerAdapter]:
    """Bind ``fields`` to every record logged inside the ``with`` block.

    A ``correlation_id`` field is also published to the context variable so
    loggers obtained elsewhere pick it up for the duration of the block.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> with with_fields(logger, correlation_id="req-1", operation="generate") as log:
    ...     log.info("Generating document")
    """
    return _WithFieldsContext(logger, fields)
