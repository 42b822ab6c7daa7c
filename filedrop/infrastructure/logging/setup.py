"""
Logging setup and configuration utilities.

This module configures loguru sinks (console and rotating file) and routes
records from the standard ``logging`` module into loguru, so the rest of the
code base can keep using ``logging.getLogger(__name__)``.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict

from loguru import logger as loguru_logger

from ..config.models import LoggingConfig
from ...core.interfaces.lifecycle import IComponent

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward standard logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup application logging with the given configuration.

    Args:
        config: Logging configuration
    """
    level = config.level.upper()
    loguru_logger.remove()

    if config.console_enabled:
        loguru_logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False
        )

    if config.file_enabled:
        log_dir = Path(config.log_directory)
        log_dir.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            log_dir / "filedrop.log",
            format=config.format,
            level=level,
            rotation=config.max_file_size,
            retention=config.backup_count,
            compression="zip",
            backtrace=True,
            diagnose=False
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


class LoggingManager(IComponent):
    """
    Logging manager for runtime logging configuration.

    Applies the logging configuration at startup and allows the level to be
    changed while the application runs.
    """

    def __init__(self, config: LoggingConfig) -> None:
        self._config = config
        self._started = False
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return "LoggingManager"

    @property
    def version(self) -> str:
        return "1.0.0"

    @property
    def config(self) -> LoggingConfig:
        return self._config

    async def start(self) -> None:
        """Apply the logging configuration."""
        if self._started:
            return

        setup_logging(self._config)
        self._started = True
        self._logger.debug(f"Logging configured at level {self._config.level}")

    async def stop(self) -> None:
        if not self._started:
            return
        await loguru_logger.complete()
        self._started = False

    def set_level(self, level: str) -> None:
        """Change the log level of every sink."""
        self._config.level = level.upper()
        if self._started:
            setup_logging(self._config)
            self._logger.info(f"Log level changed to {self._config.level}")

    async def check_health(self) -> Dict[str, Any]:
        log_dir = Path(self._config.log_directory)

        return {
            'healthy': True,
            'status': 'running' if self._started else 'stopped',
            'details': {
                'log_level': self._config.level,
                'log_directory': str(log_dir),
                'console_enabled': self._config.console_enabled,
                'file_enabled': self._config.file_enabled,
                'max_file_size': self._config.max_file_size,
                'backup_count': self._config.backup_count
            }
        }
