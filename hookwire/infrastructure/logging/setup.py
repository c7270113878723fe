"""
Logging setup and configuration utilities.

This module configures loguru as the single logging backend: a console sink
(human-readable or one JSON document per line), an optional rotating file
sink, and an intercept handler so records from the standard ``logging``
module (used throughout the package and by uvicorn) reach loguru as well.
"""

import logging
import sys
from pathlib import Path

from loguru import logger as loguru_logger

from ..config.models import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message} {extra}"
)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside the logging module so loguru reports it
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup application logging with the given configuration.

    Args:
        config: Logging configuration
    """
    level = config.level.upper()

    # Remove default handler
    loguru_logger.remove()

    if config.console_enabled:
        if config.json:
            loguru_logger.add(sys.stdout, level=level, serialize=True)
        else:
            loguru_logger.add(
                sys.stderr,
                format=CONSOLE_FORMAT,
                level=level,
                colorize=True,
                backtrace=True,
                diagnose=False,
            )

    if config.file_enabled:
        log_dir = Path(config.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)

        loguru_logger.add(
            log_dir / "app.log",
            format=FILE_FORMAT,
            level=level,
            rotation=config.max_file_size,
            retention=config.backup_count,
            compression="zip",
            serialize=config.json,
            backtrace=True,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True
