"""
Logging for the cleaning run.

Every module logs below the ``eu_paper_demand`` logger. ``setup_logging``
attaches a Rich console handler to it, and a rotating file handler when a
log file is configured, so that a run's step messages, partition sizes and
zero-fill counts can be kept next to the output bundle.
"""

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from ..config import LoggingConfig

PACKAGE_LOGGER = "eu_paper_demand"

_SIZE_UNITS = {"KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3, "B": 1}


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the package logger from logging settings.

    Args:
        config: Logging configuration object

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.propagate = False

    level = getattr(logging, config.level.upper())
    logger.setLevel(level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=config.level == "DEBUG",
        markup=False,
        rich_tracebacks=True
    )
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=file_path,
            maxBytes=_parse_size(config.rotation_size),
            backupCount=config.retention_days
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(file_handler)

    logger.debug(f"Logging at {config.level}, file: {config.file_path}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the package logger.

    Args:
        name: Logger name, usually ``__name__``; names outside the package
            are nested under it

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def _parse_size(size_str: str) -> int:
    """Parse a size such as '10MB' into bytes; a bare number is bytes."""
    size_str = size_str.strip().upper()

    for unit, factor in _SIZE_UNITS.items():
        if size_str.endswith(unit):
            return int(size_str[:-len(unit)]) * factor

    return int(size_str)
