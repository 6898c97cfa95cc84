"""Centralized logging configuration for protorebuild.

Console logging on stderr, with an optional rotating file log. No file is
written unless a log directory is requested, so a run never leaves files
behind in the working tree it audits.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default configuration
DEFAULT_LOG_FILE = "protorebuild.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

# Log format
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Set up logging for the protorebuild package.

    Args:
        log_dir: Directory for the rotating log file. When None, the
                 PROTOREBUILD_LOG_DIR environment variable is consulted;
                 if that is unset too, no file handler is installed.
        log_file: Log file name. Defaults to 'protorebuild.log'.
        max_bytes: Maximum size per log file before rotation. Defaults to 10MB.
        backup_count: Number of backup files to keep. Defaults to 5.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
               Can be overridden with PROTOREBUILD_LOG_LEVEL environment variable.
        console: Whether to log to stderr. Defaults to True.

    Returns:
        The root protorebuild logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("PROTOREBUILD_LOG_DIR") or None

    if level is None:
        level = os.environ.get("PROTOREBUILD_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("protorebuild")
    logger.setLevel(log_level)
    logger.propagate = False

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / log_file
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.debug("protorebuild logging initialized (level=%s, file=%s)", level, log_path)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a component.

    Args:
        name: Component name (e.g., 'revision', 'dispatcher').
              Will be prefixed with 'protorebuild.'.

    Returns:
        Logger instance for the component.
    """
    if not name.startswith("protorebuild."):
        name = f"protorebuild.{name}"
    return logging.getLogger(name)


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Truncate long subprocess output for logging.

    Args:
        output: The output string to truncate.
        max_length: Maximum length before truncation.

    Returns:
        Truncated string with indicator if truncated.
    """
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"
