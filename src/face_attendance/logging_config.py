"""Logging setup for the attendance API."""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from flask import Flask

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    app: Flask,
    log_level: str = "INFO",
    log_dir: Optional[str] = "logs",
    max_log_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure the package logger.

    Args:
        app: Flask app instance
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_dir: folder for rotating log files; None logs to the console only
        max_log_size: size in bytes before a log file rotates
        backup_count: number of rotated files to keep
    """

    level = getattr(logging, str(log_level).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            path / "face_attendance.log",
            maxBytes=max_log_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            path / "errors.log",
            maxBytes=max_log_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        handlers.append(error_handler)

    package_logger = logging.getLogger("face_attendance")
    package_logger.setLevel(level)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.propagate = False

    app.logger.setLevel(level)
    package_logger.info("Logging ready (level=%s, dir=%s)", logging.getLevelName(level), log_dir or "-")
