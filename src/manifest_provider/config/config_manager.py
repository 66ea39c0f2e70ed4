"""
Configuration management system for manifest providers.
"""

import os
import re
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union
from dataclasses import dataclass, field, asdict
import logging

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Options consulted by providers while resolving dependencies."""
    match_manifest_versions: bool = True
    ignore_marker: str = "manifestignore"


@dataclass(frozen=True)
class ExecutablesConfig:
    """Explicit overrides for package manager executables."""
    mvn_path: Optional[str] = None
    npm_path: Optional[str] = None
    go_path: Optional[str] = None
    pip3_path: Optional[str] = None
    python3_path: Optional[str] = None
    prefer_mvnw: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    structured: bool = False


@dataclass(frozen=True)
class ProviderConfig:
    """Complete provider configuration."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    executables: ExecutablesConfig = field(default_factory=ExecutablesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        return asdict(self)


# environment variable -> (section, key)
ENV_VARS: Dict[str, Tuple[str, str]] = {
    "MATCH_MANIFEST_VERSIONS": ("analysis", "match_manifest_versions"),
    "PROVIDER_IGNORE_MARKER": ("analysis", "ignore_marker"),
    "PROVIDER_MVN_PATH": ("executables", "mvn_path"),
    "PROVIDER_NPM_PATH": ("executables", "npm_path"),
    "PROVIDER_GO_PATH": ("executables", "go_path"),
    "PROVIDER_PIP3_PATH": ("executables", "pip3_path"),
    "PROVIDER_PYTHON3_PATH": ("executables", "python3_path"),
    "PROVIDER_PREFER_MVNW": ("executables", "prefer_mvnw"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FILE": ("logging", "file"),
    "LOG_FORMAT": ("logging", "format"),
}

_SECTIONS = {
    "analysis": AnalysisConfig,
    "executables": ExecutablesConfig,
    "logging": LoggingConfig,
}
_BOOLEAN_KEYS = {
    ("analysis", "match_manifest_versions"),
    ("executables", "prefer_mvnw"),
    ("logging", "structured"),
}
_INTEGER_KEYS = {("logging", "max_file_size"), ("logging", "backup_count")}
_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigManager:
    """
    Loads the provider configuration once per manager.

    Sources are layered, later ones winning: dataclass defaults, the YAML
    configuration file, then the environment variables in ``ENV_VARS``.
    String values may reference other environment variables as ``${NAME}``.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to a YAML configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[ProviderConfig] = None

    def load_config(self) -> ProviderConfig:
        """
        Load configuration from all sources.

        Returns:
            Complete provider configuration

        Raises:
            ConfigurationError: If a source is unreadable or a value is invalid
        """
        if self._config is not None:
            return self._config

        sections = ProviderConfig().to_dict()
        if self.config_file:
            self._overlay(sections, self._load_config_file(self.config_file))
        self._overlay(sections, self._load_env_config())

        for section, values in sections.items():
            for key, value in values.items():
                values[key] = self._coerce(section, key, self._expand_env_refs(value))
        self._validate_config(sections)

        self._config = self._dict_to_config(sections)
        return self._config

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_path}", cause=e
            ) from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        logger.info(f"Loaded configuration from {config_path}")
        return config

    def _load_env_config(self) -> Dict[str, Dict[str, Any]]:
        """Collect the non-empty ``ENV_VARS`` from the process environment."""
        env_config: Dict[str, Dict[str, Any]] = {}
        for env_var, (section, key) in ENV_VARS.items():
            value = os.getenv(env_var)
            if value:
                env_config.setdefault(section, {})[key] = value
        return env_config

    @staticmethod
    def _overlay(sections: Dict[str, Dict[str, Any]], override: Dict[str, Any]) -> None:
        """
        Apply ``override`` on top of ``sections`` in place.

        Raises:
            ConfigurationError: For unknown sections or sections that are not mappings
        """
        for section, values in override.items():
            if section not in sections:
                raise ConfigurationError(
                    f"Unknown configuration section: {section}", config_section=section
                )
            if values is None:
                continue
            if not isinstance(values, dict):
                raise ConfigurationError(
                    f"Configuration section {section} must be a mapping", config_section=section
                )
            sections[section].update(values)

    @staticmethod
    def _expand_env_refs(value: Any) -> Any:
        """Replace ``${NAME}`` references in strings; unset names are left as written."""
        if not isinstance(value, str):
            return value
        return _ENV_REFERENCE.sub(lambda match: os.getenv(match.group(1), match.group(0)), value)

    @staticmethod
    def _coerce(section: str, key: str, value: Any) -> Any:
        """Convert string values of boolean and integer options."""
        if not isinstance(value, str):
            return value
        if (section, key) in _BOOLEAN_KEYS:
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
        elif (section, key) in _INTEGER_KEYS and value.strip().isdigit():
            return int(value)
        return value

    def _validate_config(self, sections: Dict[str, Dict[str, Any]]) -> None:
        """
        Check option types and values.

        Raises:
            ConfigurationError: If a value is invalid
        """
        for section, key in sorted(_BOOLEAN_KEYS):
            value = sections[section].get(key)
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r} (expected true or false)",
                    config_section=section,
                    config_key=key
                )

        for section, key in sorted(_INTEGER_KEYS):
            value = sections[section].get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(
                    f"Invalid value for {key}: {value!r} (expected a non-negative integer)",
                    config_section=section,
                    config_key=key
                )

        if not sections["analysis"].get("ignore_marker"):
            raise ConfigurationError(
                "ignore_marker must not be empty",
                config_section="analysis",
                config_key="ignore_marker"
            )

        log_level = str(sections["logging"].get("level")).upper()
        if log_level not in _VALID_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {log_level}. Valid levels: {', '.join(sorted(_VALID_LEVELS))}",
                config_section="logging",
                config_key="level"
            )
        sections["logging"]["level"] = log_level

    def _dict_to_config(self, sections: Dict[str, Dict[str, Any]]) -> ProviderConfig:
        try:
            return ProviderConfig(**{
                name: section_cls(**sections[name]) for name, section_cls in _SECTIONS.items()
            })
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration key: {e}", cause=e) from e

    def get_config(self) -> ProviderConfig:
        """Return the loaded configuration, loading it on first use."""
        if self._config is None:
            return self.load_config()
        return self._config


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path to configuration file (only used on first call)

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def get_config() -> ProviderConfig:
    """
    Get the current provider configuration.

    Returns:
        Provider configuration
    """
    return get_config_manager().get_config()


def reset_config_manager() -> None:
    """Drop the global configuration manager so the next call reloads."""
    global _config_manager
    _config_manager = None
