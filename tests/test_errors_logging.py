"""Tests for error handling and logging modules."""

import json
import logging
import pytest
from pathlib import Path

from portrait_batch.errors import (
    ConfigurationError,
    ErrorCategory,
    NameDerivationError,
    PortraitBatchError,
    ResourceError,
    format_error_for_display,
)
from portrait_batch.logging import (
    LogConfig,
    LogLevel,
    StructuredFormatter,
    configure_logging,
    get_logger,
    log_operation_complete,
    log_operation_failed,
    log_operation_start,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    configure_logging(LogConfig())


def make_record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="portrait_batch.batch",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestErrors:
    """Tests for the error hierarchy."""

    def test_categories(self):
        """Test error category values."""
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.CONFIGURATION.value == "configuration"
        assert ErrorCategory.RESOURCE.value == "resource"
        assert ErrorCategory.INTERNAL.value == "internal"

    def test_base_error(self):
        """Test basic error creation."""
        error = PortraitBatchError("Test error")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {}
        assert error.fatal is True

    def test_error_with_context(self):
        """Test error with context."""
        error = PortraitBatchError("Test error", context={"path": "x"})

        assert "context: {'path': 'x'}" in str(error)

    def test_fatal_setup_errors(self):
        """Test that setup errors stop the run."""
        assert ConfigurationError("x").category == ErrorCategory.CONFIGURATION
        assert ConfigurationError("x").fatal is True
        assert ResourceError("x").category == ErrorCategory.RESOURCE
        assert ResourceError("x").fatal is True

    def test_skippable_error(self):
        """Test that name derivation errors only skip a file."""
        error = NameDerivationError("x")

        assert error.category == ErrorCategory.VALIDATION
        assert error.fatal is False

    def test_format_with_context(self):
        """Test display formatting."""
        error = ConfigurationError("Path exists but is not a directory", context={"path": "p"})

        assert format_error_for_display(error) == (
            "[configuration] Path exists but is not a directory (path=p)"
        )

    def test_format_without_context(self):
        """Test display formatting without context."""
        assert format_error_for_display(ResourceError("gone")) == "[resource] gone"

    def test_format_foreign_error(self):
        """Test display formatting of other exceptions."""
        assert format_error_for_display(ValueError("bad")) == "[error] ValueError: bad"


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_text_format(self):
        """Test plain text output."""
        formatter = StructuredFormatter(include_timestamp=False, color=False)

        line = formatter.format(make_record("Wrote clip", returncode=0))

        assert "INFO" in line
        assert "portrait_batch.batch" in line
        assert "Wrote clip" in line
        assert "[returncode=0]" in line

    def test_text_without_context(self):
        """Test suppressing context fields."""
        formatter = StructuredFormatter(include_timestamp=False, include_context=False, color=False)

        line = formatter.format(make_record("x", command="ffmpeg -y"))

        assert "command" not in line

    def test_long_logger_name_shortened(self):
        """Test that long logger names are truncated."""
        formatter = StructuredFormatter(include_timestamp=False, color=False)
        record = make_record()
        record.name = "portrait_batch.some.very.long.module"

        line = formatter.format(record)

        assert "..." in line

    def test_json_format(self):
        """Test JSON output."""
        formatter = StructuredFormatter(json_format=True)

        data = json.loads(formatter.format(make_record("failed", level=logging.ERROR, returncode=1)))

        assert data["level"] == "error"
        assert data["message"] == "failed"
        assert data["logger"] == "portrait_batch.batch"
        assert data["context"] == {"returncode": 1}
        assert "timestamp" in data

    def test_json_unserializable_context(self):
        """Test that odd values are stringified."""
        formatter = StructuredFormatter(json_format=True)

        data = json.loads(formatter.format(make_record(path=Path("a/b"))))

        assert data["context"]["path"] == str(Path("a/b"))


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_levels(self):
        """Test verbosity mapping."""
        configure_logging(LogConfig(level=LogLevel.QUIET))
        assert logging.getLogger("portrait_batch").level == logging.ERROR

        configure_logging(LogConfig(level=LogLevel.DEBUG))
        assert logging.getLogger("portrait_batch").level == logging.DEBUG

        configure_logging(LogConfig(level=LogLevel.NORMAL))
        assert logging.getLogger("portrait_batch").level == logging.WARNING

    def test_handlers_not_duplicated(self):
        """Test that reconfiguring replaces handlers."""
        configure_logging(LogConfig())
        configure_logging(LogConfig())

        assert len(logging.getLogger("portrait_batch").handlers) == 1

    def test_file_logging(self, tmp_path):
        """Test that the log file receives debug records."""
        log_file = tmp_path / "logs" / "run.log"
        configure_logging(LogConfig(level=LogLevel.QUIET, log_file=log_file))

        get_logger("portrait_batch.test").debug("written to file only")
        for handler in logging.getLogger("portrait_batch").handlers:
            handler.flush()

        assert "written to file only" in log_file.read_text()

    def test_get_logger_hierarchy(self):
        """Test that module loggers live under portrait_batch."""
        logger = get_logger("portrait_batch.jobs")

        assert logger.name == "portrait_batch.jobs"
        assert logger.parent.name == "portrait_batch"


class TestOperationHelpers:
    """Tests for log_operation_* helpers."""

    def test_start_and_complete(self, caplog):
        """Test start and completion records."""
        caplog.set_level(logging.INFO, logger="portrait_batch")
        logger = get_logger("portrait_batch.test")

        log_operation_start(logger, "batch", workdir="/videos")
        log_operation_complete(logger, "batch", duration=1.234, files=2)

        assert caplog.records[0].getMessage() == "Starting: batch"
        assert caplog.records[0].workdir == "/videos"
        assert caplog.records[1].getMessage() == "Completed: batch"
        assert caplog.records[1].duration_seconds == 1.23
        assert caplog.records[1].files == 2

    def test_failed(self, caplog):
        """Test failure record."""
        caplog.set_level(logging.INFO, logger="portrait_batch")
        logger = get_logger("portrait_batch.test")

        log_operation_failed(logger, "batch", ResourceError("gone"))

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.error_type == "ResourceError"
        assert record.error_message == "gone"
