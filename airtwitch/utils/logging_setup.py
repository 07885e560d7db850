"""Logging setup for AirTwitch with console and rotating file output"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from airtwitch.config import LoggingConfig


def setup_logging(
    log_level: str = "INFO",
    log_file_name: str | None = None,
    log_to_console: bool = True,
    log_to_file: bool = False,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    log_format: str | None = None,
    log_directory: Path | None = None,
) -> logging.Logger:
    """
    Set up logging for the AirTwitch process.

    This configures logging to write to:
    - Console (stderr, so command output on stdout stays clean)
    - File with rotation

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file_name: Path to log file (can be absolute or relative)
        log_to_console: Whether to log to console
        log_to_file: Whether to log to file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        log_format: Custom log format string for the file handler
        log_directory: Override log directory (defaults to logs/)

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        log_format or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S"
    )

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    log_file_path: Optional[Path] = None
    if log_to_file:
        if log_directory is not None:
            log_dir = log_directory
        elif log_file_name and "/" in log_file_name:
            log_dir = Path(log_file_name).parent
            log_file_name = Path(log_file_name).name
        else:
            log_dir = Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)

        if log_file_name is None:
            timestamp = datetime.now().strftime("%Y-%m-%d")
            log_file_name = f"airtwitch-{timestamp}.log"

        log_file_path = log_dir / log_file_name
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # zeroconf and httpx are chatty at DEBUG
    for noisy in ("zeroconf", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(numeric_level, logging.WARNING))

    root_logger.debug(f"AirTwitch logging initialized - Level: {log_level}")
    if log_file_path is not None:
        root_logger.debug(f"Log file: {log_file_path}")

    return root_logger


def setup_logging_from_config(config: LoggingConfig) -> logging.Logger:
    """Configure logging from the ``logging`` section of the configuration."""
    return setup_logging(
        log_level=config.level,
        log_file_name=config.file,
        log_to_console=config.to_console,
        log_to_file=config.to_file,
        max_bytes=config.max_bytes,
        backup_count=config.backup_count,
        log_format=config.format,
    )


def log_exception(
    logger: logging.Logger, exception: Exception, message: str = "Exception occurred"
):
    """
    Log an exception with full traceback.

    Args:
        logger: Logger instance to use
        exception: Exception to log
        message: Additional context message
    """
    logger.error(f"{message}: {exception!s}", exc_info=True)
