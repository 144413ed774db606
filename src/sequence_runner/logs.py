"""Logging setup - Rich console output plus an optional log file."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import LoggingConfig

LOGGER_NAME = "sequence_runner"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: LoggingConfig, console: Console | None = None, level: str | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        config: Logging section of the app config
        console: Console for the Rich handler (stderr by default)
        level: Level override (e.g. from --verbose)

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or config.level).upper())

    # Replace handlers from earlier calls
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if config.console_logging:
        logger.addHandler(
            RichHandler(
                console=console or Console(stderr=True),
                show_path=False,
                markup=False,
            )
        )

    if config.file_logging and config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)

    logger.propagate = not logger.handlers
    return logger
