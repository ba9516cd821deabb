"""loguru configuration for paramparser.

The library itself never touches loguru's handlers: registries only bind a
module logger and emit structured payloads. Applications (and the bundled
CLI) call :func:`setup_logging` once to install console and file handlers.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from paramparser.settings import ParserSettings

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
DEBUG_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{process.id: <6} | "
    "{name}:{function}:{line} | "
    "{message}"
)


class ParserLogger:
    """Centralized loguru setup shared by the CLI and embedding applications."""

    def __init__(self) -> None:
        self.is_configured = False
        self.log_file_path: Optional[Path] = None
        self._handler_ids: list[int] = []

    def configure_logging(self, settings: Optional[ParserSettings] = None) -> None:
        """Install console (and optionally file) handlers from ``settings``.

        Calling this again replaces the handlers installed by the previous
        call, so a CLI can reconfigure after loading its settings.
        """
        settings = settings if settings is not None else ParserSettings()

        if self.is_configured:
            self.reset()
        else:
            # Drop loguru's default stderr handler
            logger.remove()

        self._configure_console_handler(settings)
        if settings.log_file:
            self._configure_file_handler(settings)

        self.is_configured = True
        logger.debug(f"Logging configured: level={settings.log_level}")

    def _configure_console_handler(self, settings: ParserSettings) -> None:
        debug = settings.log_level in ("TRACE", "DEBUG")
        handler_id = logger.add(
            sys.stderr,
            format=DEBUG_CONSOLE_FORMAT if debug else CONSOLE_FORMAT,
            level=settings.log_level,
            colorize=None,
            backtrace=debug,
            diagnose=debug,
        )
        self._handler_ids.append(handler_id)

    def _configure_file_handler(self, settings: ParserSettings) -> None:
        self.log_file_path = Path(settings.log_file)
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handler_id = logger.add(
            str(self.log_file_path),
            format=FILE_FORMAT,
            level=settings.log_level,
            rotation="10 MB",
            retention="30 days",
            compression="gz",
            encoding=settings.encoding,
            backtrace=True,
            diagnose=False,
        )
        self._handler_ids.append(handler_id)

    def reset(self) -> None:
        """Remove the handlers installed by :meth:`configure_logging`."""
        for handler_id in self._handler_ids:
            try:
                logger.remove(handler_id)
            except ValueError:
                # already dropped by a global logger.remove()
                continue
        self._handler_ids.clear()
        self.log_file_path = None
        self.is_configured = False


def create_module_logger(module_name: str) -> Any:
    """Return a loguru logger bound to ``module_name``."""
    return logger.bind(module=module_name)


_logger_instance: Optional[ParserLogger] = None


def get_logger() -> ParserLogger:
    """Return the process-wide :class:`ParserLogger`, configuring it on first use."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = ParserLogger()
        _logger_instance.configure_logging()
    return _logger_instance


def setup_logging(settings: Optional[ParserSettings] = None) -> ParserLogger:
    """Configure logging at application start-up and return the instance."""
    logger_instance = get_logger()
    if settings:
        logger_instance.configure_logging(settings)
    return logger_instance


__all__ = [
    "ParserLogger",
    "create_module_logger",
    "get_logger",
    "setup_logging",
]
