"""
Logging setup for the Book Search service.

Configures the root logger once: console output plus a rotating
book_search.log file. Third-party PDF and HTTP libraries are capped at
WARNING so page-level parser chatter does not drown service logs.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


_logger_initialized = False

LOG_FILENAME = "book_search.log"

# pdfminer logs every parsed object at DEBUG
NOISY_LOGGERS = ("pdfminer", "pypdf", "urllib3")


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    logs_directory: Path = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5
) -> None:
    """
    Initialize the root logger with console and optional file handlers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string for log messages.
        logs_directory: Directory for book_search.log. If None, file logging is disabled.
        max_file_size_mb: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    handlers = [logging.StreamHandler(sys.stdout)]

    if logs_directory:
        logs_directory = Path(logs_directory)
        logs_directory.mkdir(parents=True, exist_ok=True)

        handlers.append(RotatingFileHandler(
            logs_directory / LOG_FILENAME,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8"
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logger_initialized = True


def _setup_from_config() -> None:
    """Initialize logging from config.json, or console-only if it cannot be read."""
    from .config_loader import get_config
    from .exceptions import ConfigurationError

    try:
        config = get_config()
    except ConfigurationError:
        setup_logging()
        return

    try:
        setup_logging(
            log_level=config.logging.level,
            log_format=config.logging.format,
            logs_directory=config.paths.logs_directory,
            max_file_size_mb=config.logging.max_file_size_mb,
            backup_count=config.logging.backup_count
        )
    except OSError:
        # Unwritable logs directory
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger, initializing logging from config on first use.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Logger instance.
    """
    if not _logger_initialized:
        _setup_from_config()

    return logging.getLogger(name)


if __name__ == "__main__":
    setup_logging(log_level="DEBUG")

    logger = get_logger(__name__)
    logger.debug("Debug message")
    logger.info("Info message")

    get_logger("pdfminer.psparser").debug("Suppressed parser output")
