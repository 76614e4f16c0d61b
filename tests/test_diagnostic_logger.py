"""Tests for diagnostic logger functionality"""

import logging

import pytest

from netplane.api.diagnostic_logger import DiagnosticLogger, configure_logging


class TestDiagnosticLogger:
    """Test suite for DiagnosticLogger class"""

    def test_diagnostic_logger_initialization(self):
        logger = DiagnosticLogger()

        assert logger.start_time is not None
        assert logger.errors == []

    def test_log_error_keeps_context(self):
        logger = DiagnosticLogger()
        context = {"resource_kind": "route_table", "resource_name": "pool-a"}

        logger.log_error("lookup failed", context)

        assert logger.errors[0]["error"] == "lookup failed"
        assert logger.errors[0]["context"] == context

    def test_log_error_without_context(self):
        logger = DiagnosticLogger()

        logger.log_error("lookup failed")

        assert logger.errors[0]["context"] == {}


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_writes_to_log_dir(tmp_path, restore_root_logger):
    configure_logging(level="debug", log_dir=str(tmp_path))

    logging.getLogger("netplane.test").info("hello")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("botocore").level == logging.WARNING
    assert "hello" in (tmp_path / "netplane.log").read_text()
