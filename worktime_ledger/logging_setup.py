"""
Logging Setup Module

Configures console and rotating file logging for the worktime ledger.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'worktime_ledger'


def setup_logging(
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    max_log_size_mb: int = 10,
    backup_count: int = 3
) -> logging.Logger:
    """
    Set up logging for the application.

    Args:
        log_file: Path to log file (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_log_size_mb: Maximum log file size in MB before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured package logger
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console output is for warnings; the CLI prints its own results
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_log_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger inside the package hierarchy.

    Args:
        name: Module name (``__name__``) or a short component name

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
