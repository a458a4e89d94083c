"""Tests for logging_config.py - step tagging and tool output logging."""

import logging

import pytest

from fc_metrics_updater.logging_config import (
    LOGGER_NAME,
    StepFilter,
    get_logger,
    log_tool_output,
    setup_logging,
)


@pytest.fixture
def restore_logging():
    """Undo setup_logging's changes to the root and package loggers."""
    root = logging.getLogger()
    package = logging.getLogger(LOGGER_NAME)
    saved_handlers = root.handlers[:]
    saved_root_level = root.level
    saved_package_level = package.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in saved_handlers:
            handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_root_level)
    package.setLevel(saved_package_level)


class TestGetLogger:
    def test_package_logger(self):
        assert get_logger().name == LOGGER_NAME

    def test_module_names_prefixed(self):
        assert get_logger("workflow").name == f"{LOGGER_NAME}.workflow"
        assert get_logger(f"{LOGGER_NAME}.commands").name == f"{LOGGER_NAME}.commands"


class TestStepFilter:
    def test_missing_step_defaulted(self):
        record = logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 1, "hello", None, None)
        assert StepFilter().filter(record)
        assert record.step == "-"

    def test_existing_step_kept(self):
        record = logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 1, "hello", None, None)
        record.step = "build"
        StepFilter().filter(record)
        assert record.step == "build"


class TestLogToolOutput:
    """Child process output is logged line by line under its step."""

    def test_one_record_per_line(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        logger = get_logger("commands")
        log_tool_output(logger, "build", "   Compiling fc-metrics-generator\n\n warning: unused\n")

        records = [r for r in caplog.records if r.name == logger.name]
        assert [r.getMessage() for r in records] == [
            "build:    Compiling fc-metrics-generator",
            "build:  warning: unused",
        ]
        assert all(r.step == "build" for r in records)
        assert all(r.levelno == logging.DEBUG for r in records)

    def test_disabled_level_logs_nothing(self, caplog):
        caplog.set_level(logging.WARNING, logger=LOGGER_NAME)
        log_tool_output(get_logger("commands"), "download", "curl: (6) Could not resolve host\n")
        assert caplog.records == []

    def test_custom_level(self, caplog):
        caplog.set_level(logging.WARNING, logger=LOGGER_NAME)
        logger = get_logger("commands")
        log_tool_output(logger, "format", "bad.go:1:1: expected 'package'", logging.WARNING)
        assert [r.step for r in caplog.records] == ["format"]


class TestSetupLogging:
    def test_levels(self, restore_logging):
        assert setup_logging(quiet=True).level == logging.ERROR
        assert setup_logging(verbose=True).level == logging.DEBUG
        assert setup_logging().level == logging.WARNING

    def test_log_file_has_step_column(self, restore_logging, tmp_path):
        """The file log records every level, with the step in brackets."""
        log_file = tmp_path / "update.log"
        setup_logging(quiet=True, log_file=str(log_file))

        logger = get_logger("workflow")
        logger.debug("downloading %s", "https://example.com/metrics.rs", extra={"step": "download"})
        logger.info("no step here")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert lines[0].endswith("[download] downloading https://example.com/metrics.rs")
        assert " - DEBUG - " in lines[0]
        assert lines[1].endswith("[-] no step here")

    def test_log_file_appends(self, restore_logging, tmp_path):
        log_file = tmp_path / "update.log"
        log_file.write_text("earlier run\n", encoding="utf-8")
        setup_logging(log_file=str(log_file))
        get_logger().warning("second run", extra={"step": "format"})
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert log_file.read_text(encoding="utf-8").startswith("earlier run\n")
