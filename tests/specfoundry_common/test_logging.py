"""Tests for specfoundry_common.logging."""

from __future__ import annotations

import io
import json
import logging

import pytest

from specfoundry_common.logging import (
    CorrelationContext,
    JsonFormatter,
    LoggerAdapter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    with_fields,
)


def _capture(name: str) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger(name)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, stream


def _records(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.fixture(autouse=True)
def reset_correlation() -> None:
    set_correlation_id(None)


class TestGetLogger:
    """Tests for get_logger."""

    def test_returns_adapter(self) -> None:
        """get_logger wraps the named logger."""
        logger = get_logger(__name__)
        assert isinstance(logger, LoggerAdapter)
        assert logger.logger.name == __name__

    def test_null_handler(self) -> None:
        """A NullHandler is attached to otherwise unconfigured loggers."""
        logger = get_logger(f"{__name__}.null_handler")
        assert any(isinstance(h, logging.NullHandler) for h in logger.logger.handlers)


class TestLoggerAdapter:
    """Tests for structured field injection."""

    def test_operation_and_status_defaults(self) -> None:
        """Operation defaults to unknown and status follows the level."""
        base, stream = _capture(f"{__name__}.defaults")
        adapter = LoggerAdapter(base, {})

        adapter.info("fine")
        adapter.warning("careful")
        adapter.error("broken")

        records = _records(stream)
        assert [r["status"] for r in records] == ["success", "warning", "error"]
        assert all(r["operation"] == "unknown" for r in records)

    def test_explicit_fields_win(self) -> None:
        """Per-call extras are not overwritten."""
        base, stream = _capture(f"{__name__}.explicit")
        LoggerAdapter(base, {}).error(
            "handled", extra={"operation": "generate", "status": "success", "root": "Order"}
        )

        (record,) = _records(stream)
        assert record["operation"] == "generate"
        assert record["status"] == "success"
        assert record["root"] == "Order"


class TestCorrelation:
    """Tests for correlation id propagation."""

    def test_context_scoping(self) -> None:
        """CorrelationContext restores the previous id."""
        set_correlation_id("outer")
        with CorrelationContext("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"

    def test_with_fields(self) -> None:
        """Bound fields and the correlation id reach every record."""
        base, stream = _capture(f"{__name__}.with_fields")

        with with_fields(base, correlation_id="req-7", operation="cli_generate") as adapter:
            adapter.info("inside")
            get_logger(f"{__name__}.with_fields").info("from elsewhere")
        assert get_correlation_id() is None

        first, second = _records(stream)
        assert first["correlation_id"] == "req-7"
        assert first["operation"] == "cli_generate"
        assert second["correlation_id"] == "req-7"


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_payload(self) -> None:
        """Records become one JSON object per line."""
        base, stream = _capture(f"{__name__}.formatter")
        base.info("Generated %s", "Order", extra={"duration_ms": 1.5, "ignored": object()})

        (record,) = _records(stream)
        assert record["message"] == "Generated Order"
        assert record["level"] == "INFO"
        assert record["duration_ms"] == 1.5
        assert "ignored" not in record
        assert str(record["ts"]).endswith("Z")

    def test_exception(self) -> None:
        """Exception tracebacks are included."""
        base, stream = _capture(f"{__name__}.exception")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            base.exception("failed")

        (record,) = _records(stream)
        assert "RuntimeError: boom" in str(record["exc_info"])
