"""Tests for structured logging configuration."""

import json
import logging
import sys

import pytest

from ecotracker.logging_config import (
    JsonFormatter,
    StructuredLogger,
    TextFormatter,
    correlation_id_ctx,
    get_logger,
    setup_logging,
)


def make_record(
    level: int = logging.INFO,
    msg: str = "Test message",
    exc_info=None,
    **extra_fields,
) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ecotracker.test",
        level=level,
        pathname="/app/ecotracker/services/pipeline.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    if extra_fields:
        record.extra_fields = extra_fields
    return record


@pytest.fixture
def correlation_id():
    token = correlation_id_ctx.set("corr-123")
    yield "corr-123"
    correlation_id_ctx.reset(token)


class TestJsonFormatter:
    """Tests for JSON log formatting."""

    def test_basic_fields(self):
        parsed = json.loads(JsonFormatter(service_name="sensor-api").format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["service"] == "sensor-api"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "ecotracker.test"
        assert "timestamp" in parsed
        assert "correlation_id" not in parsed
        assert "location" not in parsed

    def test_includes_correlation_id(self, correlation_id):
        parsed = json.loads(JsonFormatter().format(make_record()))

        assert parsed["correlation_id"] == correlation_id

    def test_extra_fields_are_top_level(self):
        record = make_record(device_id="dev-1", alerts=2)

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["device_id"] == "dev-1"
        assert parsed["alerts"] == 2

    def test_error_includes_location(self):
        record = make_record(level=logging.ERROR, msg="Forecast failed")
        record.funcName = "generate_forecast"

        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["location"] == {
            "file": "/app/ecotracker/services/pipeline.py",
            "line": 42,
            "function": "generate_forecast",
        }

    def test_includes_exception(self):
        try:
            raise ValueError("bad reading")
        except ValueError:
            exc_info = sys.exc_info()

        parsed = json.loads(
            JsonFormatter().format(make_record(level=logging.ERROR, exc_info=exc_info))
        )

        assert "ValueError: bad reading" in parsed["exception"]


class TestTextFormatter:
    """Tests for text log formatting."""

    def test_basic_format(self):
        output = TextFormatter(service_name="sensor-api").format(make_record())

        assert " - sensor-api - INFO - [-] - Test message" in output

    def test_includes_correlation_id(self, correlation_id):
        output = TextFormatter().format(make_record())

        assert f"[{correlation_id}]" in output

    def test_appends_extra_fields(self):
        output = TextFormatter().format(make_record(device_id="dev-1", delivered=3))

        assert output.endswith("Test message device_id=dev-1 delivered=3")


class TestStructuredLogger:
    """Tests for the StructuredLogger wrapper."""

    def test_get_logger_returns_structured_logger(self):
        assert isinstance(get_logger("ecotracker.x"), StructuredLogger)

    def test_passes_extra_fields(self, caplog):
        logger = get_logger("ecotracker.test.extra")

        with caplog.at_level(logging.INFO, logger="ecotracker.test.extra"):
            logger.info("Reading stored", device_id="dev-1")

        assert caplog.records[-1].getMessage() == "Reading stored"
        assert caplog.records[-1].extra_fields == {"device_id": "dev-1"}

    def test_records_caller_location(self, caplog):
        logger = get_logger("ecotracker.test.location")

        with caplog.at_level(logging.INFO, logger="ecotracker.test.location"):
            logger.info("Where am I")
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("Failed here")

        info_record, exception_record = caplog.records[-2:]
        assert info_record.funcName == "test_records_caller_location"
        assert exception_record.funcName == "test_records_caller_location"
        assert info_record.pathname.endswith("test_logging.py")

    def test_no_extra_fields_attribute_without_kwargs(self, caplog):
        logger = get_logger("ecotracker.test.plain")

        with caplog.at_level(logging.WARNING, logger="ecotracker.test.plain"):
            logger.warning("Plain message")

        assert not hasattr(caplog.records[-1], "extra_fields")

    def test_exception_captures_traceback(self, caplog):
        logger = get_logger("ecotracker.test.exc")

        with caplog.at_level(logging.ERROR, logger="ecotracker.test.exc"):
            try:
                raise RuntimeError("storage down")
            except RuntimeError:
                logger.exception("Request failed", path="/api/esp/data")

        record = caplog.records[-1]
        assert record.exc_info is not None
        assert record.extra_fields == {"path": "/api/esp/data"}


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_setup(self):
        setup_logging(log_format="json", log_level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_text_setup(self):
        setup_logging(log_format="text", log_level="warning")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_quiets_third_party_loggers(self):
        setup_logging()

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("apscheduler").level == logging.WARNING
