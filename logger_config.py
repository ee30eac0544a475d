"""
Logging Configuration for the Machine Fleet Monitor
Console logging with colors plus optional rotating log files
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from settings import APP


class ColoredFormatter(logging.Formatter):
    """Colored console formatter"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record):
        # Work on a copy so file handlers sharing the record keep a plain level name
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
            )
        return super().format(record)


def setup_logging(
    name: str = "fleet_monitor",
    level: int = logging.INFO,
    log_to_file: bool = False,
    log_to_console: bool = True,
    logs_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup logging with optional rotation and error tracking

    Args:
        name: Logger name ("" configures the root logger)
        level: Logging level
        log_to_file: Enable file logging
        log_to_console: Enable console logging
        logs_dir: Directory for log files (defaults to APP.logs_dir)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers = []

    file_formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_formatter = ColoredFormatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    if log_to_file:
        log_dir = logs_dir or APP.logs_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        file_stem = name or "fleet_monitor"

        # Main rotating log file (10MB max, keep 5 backups)
        main_handler = RotatingFileHandler(
            log_dir / f"{file_stem}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        main_handler.setLevel(level)
        main_handler.setFormatter(file_formatter)
        logger.addHandler(main_handler)

        # Error log file (only ERROR and CRITICAL)
        error_handler = RotatingFileHandler(
            log_dir / f"{file_stem}_errors.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(file_formatter)
        logger.addHandler(error_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


def configure_from_settings() -> logging.Logger:
    """Configure the root logger from APP settings (used by the API entrypoint)"""
    level = logging.getLevelName(APP.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    return setup_logging("", level=level, log_to_file=APP.log_to_file)