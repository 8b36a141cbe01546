"""Logging setup shared by the CLI and the API.

Every component logs under the ``pitch_coach`` logger, e.g.
``pitch_coach.extraction`` or ``pitch_coach.api.drafts``.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "pitch_coach"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Route application logs to stderr and, optionally, a file.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Level name; unknown names fall back to INFO
        log_file: File to append records to, created with its parent directories

    Returns:
        The ``pitch_coach`` logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(log_level)
    logger.addHandler(_console_handler(log_level))
    if log_file:
        logger.addHandler(_file_handler(log_file, log_level))
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_from_env(default_level: str = "INFO") -> logging.Logger:
    """Set up logging from ``LOG_LEVEL`` and ``LOG_FILE``."""
    log_file = os.getenv("LOG_FILE")
    return setup_logging(
        level=os.getenv("LOG_LEVEL", default_level),
        log_file=Path(log_file) if log_file else None,
    )
