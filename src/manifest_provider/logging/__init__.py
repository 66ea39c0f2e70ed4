"""
Logging system for the manifest providers.
"""

from .logger_config import setup_logging, set_log_level, close_logging, LoggerConfig
from .log_formatter import StructuredFormatter, ColoredFormatter

__all__ = [
    "setup_logging",
    "set_log_level",
    "close_logging",
    "LoggerConfig",
    "StructuredFormatter",
    "ColoredFormatter"
]
