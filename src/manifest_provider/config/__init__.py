"""
Configuration management for manifest providers.
"""

from .config_manager import (
    ConfigManager, ProviderConfig, AnalysisConfig, ExecutablesConfig,
    LoggingConfig, get_config_manager, get_config, reset_config_manager
)

__all__ = [
    "ConfigManager",
    "ProviderConfig",
    "AnalysisConfig",
    "ExecutablesConfig",
    "LoggingConfig",
    "get_config_manager",
    "get_config",
    "reset_config_manager"
]
