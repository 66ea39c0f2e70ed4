"""
Error types raised by manifest providers and the orchestrator.
"""

from .exceptions import (
    ProviderError, ManifestReadError, LockFileMissingError,
    ExecutableResolutionError, ToolExecutionError, DependencyResolutionError,
    VersionMismatchError, UnsupportedManifestError, ConfigurationError,
    AnalysisTimeoutError
)

__all__ = [
    "ProviderError",
    "ManifestReadError",
    "LockFileMissingError",
    "ExecutableResolutionError",
    "ToolExecutionError",
    "DependencyResolutionError",
    "VersionMismatchError",
    "UnsupportedManifestError",
    "ConfigurationError",
    "AnalysisTimeoutError"
]
