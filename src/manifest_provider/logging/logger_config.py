"""
Logger configuration and setup for the manifest providers.
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..config import LoggingConfig, get_config
from .log_formatter import ColoredFormatter, StructuredFormatter

_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}


@dataclass
class LoggerConfig:
    """Configuration for logging system."""
    level: str = "INFO"
    file_path: Optional[str] = None
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    enable_console: bool = True
    enable_structured: bool = False
    enable_colors: bool = True

    @classmethod
    def from_config(cls, config: LoggingConfig) -> "LoggerConfig":
        """Build logger settings from the ``logging`` configuration section."""
        return cls(
            level=config.level,
            file_path=config.file,
            format_string=config.format,
            max_file_size=config.max_file_size,
            backup_count=config.backup_count,
            enable_structured=config.structured
        )


class LoggingManager:
    """
    Owns the handlers installed on the root logger.

    Console output goes to stderr so that content written to stdout stays
    machine-readable; an optional rotating file handler is added when a log
    file is configured.
    """

    def __init__(self):
        self._handlers: Dict[str, logging.Handler] = {}
        self._configured = False
        self.config: Optional[LoggerConfig] = None

    @property
    def configured(self) -> bool:
        return self._configured

    def setup_logging(self, config: Optional[LoggerConfig] = None, force: bool = False) -> None:
        """
        Set up the logging system.

        Args:
            config: Logging configuration (built from the process configuration if None)
            force: Replace handlers installed by an earlier call
        """
        if self._configured and not force:
            return
        if self._configured:
            self.close_handlers()

        if config is None:
            config = LoggerConfig.from_config(get_config().logging)
        self.config = config

        root_logger = logging.getLogger()
        root_logger.setLevel(_level(config.level))

        if config.enable_console:
            self._install('console', self._create_console_handler(config))

        if config.file_path:
            self._install('file', self._create_file_handler(config))

        logging.getLogger(__name__).debug(f"Logging system initialized with level: {config.level}")
        self._configured = True

    def _install(self, name: str, handler: logging.Handler) -> None:
        logging.getLogger().addHandler(handler)
        self._handlers[name] = handler

    def _create_console_handler(self, config: LoggerConfig) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_level(config.level))

        if config.enable_structured:
            formatter = StructuredFormatter()
        elif config.enable_colors and sys.stderr.isatty():
            formatter = ColoredFormatter(config.format_string)
        else:
            formatter = logging.Formatter(config.format_string)

        handler.setFormatter(formatter)
        return handler

    def _create_file_handler(self, config: LoggerConfig) -> logging.Handler:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_file_size * 1024 * 1024,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        handler.setLevel(_level(config.level))

        if config.enable_structured:
            handler.setFormatter(StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter(config.format_string))
        return handler

    def set_level(self, level: str) -> None:
        """
        Change the level of the root logger and every installed handler.

        Args:
            level: New logging level
        """
        log_level = _level(level)
        logging.getLogger().setLevel(log_level)
        for handler in self._handlers.values():
            handler.setLevel(log_level)
        if self.config is not None:
            self.config.level = level.upper()

    def close_handlers(self) -> None:
        """Detach and close every installed handler."""
        root_logger = logging.getLogger()
        for handler in self._handlers.values():
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()
        self._configured = False


def _level(level: str) -> int:
    return _LEVELS.get(level.upper(), logging.INFO)


_logging_manager = LoggingManager()


def setup_logging(config: Optional[LoggerConfig] = None, force: bool = False) -> None:
    """
    Set up the global logging system.

    Args:
        config: Logging configuration
        force: Replace handlers installed by an earlier call
    """
    _logging_manager.setup_logging(config, force=force)


def set_log_level(level: str) -> None:
    """Set the global logging level."""
    _logging_manager.set_level(level)


def close_logging() -> None:
    """Close logging system and clean up resources."""
    _logging_manager.close_handlers()
