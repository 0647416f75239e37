"""Tests for structured logging setup."""

import json
import logging
import sys

import pytest

from mtsfv.common.logging import (
    DetailedFormatter,
    LogContext,
    SimpleFormatter,
    StructuredFormatter,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """setup_logging replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message="hello", exc_info=None):
    return logging.LogRecord(
        name="mtsfv.test", level=logging.WARNING, pathname=__file__, lineno=10,
        msg=message, args=(), exc_info=exc_info, func="test_func",
    )


class TestFormatters:
    """Tests for the formatters."""

    def test_structured_fields(self):
        data = json.loads(StructuredFormatter().format(make_record()))

        assert data["level"] == "WARNING"
        assert data["logger"] == "mtsfv.test"
        assert data["message"] == "hello"
        assert data["function"] == "test_func"
        assert data["line"] == 10
        assert "thread" in data
        assert "timestamp" in data

    def test_structured_exception(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = make_record(exc_info=sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad value"
        assert "Traceback" in data["exception"]["traceback"]

    def test_structured_extra_fields(self):
        record = make_record()
        record.extra_fields = {"batch": 3, "path": object()}

        data = json.loads(StructuredFormatter().format(record))

        assert data["batch"] == 3
        assert isinstance(data["path"], str)

    def test_simple_and_detailed(self):
        record = make_record()

        assert SimpleFormatter().format(record) == "WARNING  | mtsfv.test | hello"
        detailed = DetailedFormatter().format(record)
        assert "mtsfv.test:test_func:10" in detailed
        assert record.threadName in detailed


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.parametrize("fmt, formatter", [
        ("simple", SimpleFormatter),
        ("detailed", DetailedFormatter),
        ("json", StructuredFormatter),
    ])
    def test_console_handler_on_stderr(self, restore_root_logger, fmt, formatter):
        setup_logging(level="INFO", format=fmt)

        (handler,) = restore_root_logger.handlers
        assert handler.stream is sys.stderr
        assert isinstance(handler.formatter, formatter)
        assert restore_root_logger.level == logging.INFO

    def test_unknown_level_rejected(self, restore_root_logger):
        handlers = list(restore_root_logger.handlers)

        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="verbose")

        assert restore_root_logger.handlers == handlers

    def test_file_handler_writes_json(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "mtsfv.log"
        setup_logging(level="DEBUG", format="simple", log_file=log_file,
                      max_file_size_mb=1, backup_count=2)

        logging.getLogger("mtsfv.test").info("written to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        file_handler = restore_root_logger.handlers[1]
        assert file_handler.maxBytes == 1024 * 1024
        assert file_handler.backupCount == 2

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written to file"


class TestLogContext:
    """Tests for LogContext."""

    def test_fields_attached_inside_context_only(self):
        logger = logging.getLogger("mtsfv.test")

        with LogContext(logger, batch=7):
            inside = logging.getLogRecordFactory()(
                "mtsfv.test", logging.INFO, __file__, 1, "msg", (), None
            )
        outside = logging.getLogRecordFactory()(
            "mtsfv.test", logging.INFO, __file__, 1, "msg", (), None
        )

        assert inside.extra_fields == {"batch": 7}
        assert not hasattr(outside, "extra_fields")
