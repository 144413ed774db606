"""Tests for logging setup."""

import io
import logging

from rich.console import Console

from sequence_runner.config import LoggingConfig
from sequence_runner.logs import LOGGER_NAME, setup_logging


def test_console_handler():
    """Test records reach the Rich console."""
    output = io.StringIO()
    logger = setup_logging(LoggingConfig(level="INFO"), console=Console(file=output, width=120))

    logger.getChild("runners").info("Run completed")

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert "Run completed" in output.getvalue()


def test_level_override_and_handler_replacement():
    """Test repeated calls replace handlers and honour the override."""
    config = LoggingConfig(level="WARNING")
    setup_logging(config, console=Console(file=io.StringIO()))
    logger = setup_logging(config, console=Console(file=io.StringIO()), level="debug")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    config = LoggingConfig(level="INFO", console_logging=False, file_logging=True, file=log_file)
    logger = setup_logging(config)

    logger.warning("Delegate hide error")
    for handler in logger.handlers:
        handler.flush()

    assert logger.propagate is False
    assert "Delegate hide error" in log_file.read_text()


def test_no_handlers_propagates():
    logger = setup_logging(LoggingConfig(console_logging=False))
    assert logger.handlers == []
    assert logger.propagate is True
