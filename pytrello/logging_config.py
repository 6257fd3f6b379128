"""Centralized logging configuration for pytrello."""

from __future__ import annotations

import logging
import sys

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure the ``pytrello`` logger.

    Library code only ever calls ``logging.getLogger(__name__)``; this is meant
    for applications (and the bundled CLI) that want readable console output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR). Unknown names
               fall back to INFO.
        log_file: Optional path to a log file. Records go to both stderr and the
                  file, the file copy carrying timestamps.

    Returns:
        The configured package logger

    Example:
        >>> setup_logging("DEBUG")  # Show each Trello request and retry warning
        >>> client = TrelloClient(api_key="...", token="...")
        >>> setup_logging("ERROR", "pytrello.log")  # Errors only, also written to pytrello.log
    """
    logger = logging.getLogger("pytrello")
    logger.setLevel(LEVELS.get(level.upper(), logging.INFO))

    # Calling twice must not duplicate output
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
