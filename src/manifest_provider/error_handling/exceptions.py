"""
Custom exceptions for the manifest provider system.
"""

from typing import Optional, Dict, Any


class ProviderError(Exception):
    """
    Base exception for all manifest provider errors.

    Carries a stable error code and a context mapping (paths, commands,
    versions) so callers can report failures without parsing messages.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize provider error.

        Args:
            message: Error message
            error_code: Optional error code for categorization
            context: Additional context information
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None
        }

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class ManifestReadError(ProviderError):
    """
    Exception for manifest access errors.

    Raised when a manifest file is missing, unreadable, or malformed.
    """

    def __init__(
        self,
        message: str,
        manifest_path: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize manifest read error.

        Args:
            message: Error message
            manifest_path: Path to the manifest that could not be read
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if manifest_path:
            context['manifest_path'] = manifest_path

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'MANIFEST_READ')
        super().__init__(message, **kwargs)

        self.manifest_path = manifest_path


class LockFileMissingError(ProviderError):
    """
    Exception for a required lock file that does not exist.

    Raised by providers whose dependency resolution is only reproducible
    when a lock file pins the resolved versions.
    """

    def __init__(
        self,
        message: str,
        lock_file: Optional[str] = None,
        lock_file_dir: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize lock file error.

        Args:
            message: Error message
            lock_file: Expected lock file name
            lock_file_dir: Directory that was searched
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if lock_file:
            context['lock_file'] = lock_file
        if lock_file_dir:
            context['lock_file_dir'] = lock_file_dir

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'LOCK_FILE_MISSING')
        super().__init__(message, **kwargs)

        self.lock_file = lock_file
        self.lock_file_dir = lock_file_dir


class ExecutableResolutionError(ProviderError):
    """
    Exception for package manager executables that cannot be resolved.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        candidate: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize executable resolution error.

        Args:
            message: Error message
            command: Command name that was looked up
            candidate: Path that was tried last, if any
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if command:
            context['command'] = command
        if candidate:
            context['candidate'] = candidate

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'EXECUTABLE_NOT_FOUND')
        super().__init__(message, **kwargs)

        self.command = command
        self.candidate = candidate


class ToolExecutionError(ProviderError):
    """
    Exception for an external package manager call that exited with an error.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize tool execution error.

        Args:
            message: Error message
            command: Command line that was executed
            exit_code: Process exit code
            stderr: Captured standard error output
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if command:
            context['command'] = command
        if exit_code is not None:
            context['exit_code'] = exit_code

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'TOOL_FAILED')
        super().__init__(message, **kwargs)

        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr or ""


class DependencyResolutionError(ProviderError):
    """
    Exception for dependencies that cannot be resolved in the environment.
    """

    def __init__(
        self,
        message: str,
        package: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if package:
            context['package'] = package

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'DEPENDENCY_UNRESOLVED')
        super().__init__(message, **kwargs)

        self.package = package


class VersionMismatchError(DependencyResolutionError):
    """
    Exception for a resolved version that differs from the manifest version.

    Only raised when manifest versions are required to match.
    """

    def __init__(
        self,
        message: str,
        package: Optional[str] = None,
        declared_version: Optional[str] = None,
        resolved_version: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if declared_version:
            context['declared_version'] = declared_version
        if resolved_version:
            context['resolved_version'] = resolved_version

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'VERSION_MISMATCH')
        super().__init__(message, package=package, **kwargs)

        self.declared_version = declared_version
        self.resolved_version = resolved_version


class UnsupportedManifestError(ProviderError):
    """Exception for manifest files no provider handles."""

    def __init__(
        self,
        message: str,
        manifest_path: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if manifest_path:
            context['manifest_path'] = manifest_path

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'UNSUPPORTED_MANIFEST')
        super().__init__(message, **kwargs)

        self.manifest_path = manifest_path


class ConfigurationError(ProviderError):
    """
    Exception for an unreadable configuration file or an invalid option value.
    """

    def __init__(
        self,
        message: str,
        config_section: Optional[str] = None,
        config_key: Optional[str] = None,
        **kwargs
    ):
        """
        Initialize configuration error naming the offending option.

        Args:
            message: Error message
            config_section: Configuration section with error
            config_key: Specific configuration key with error
            **kwargs: Additional arguments for base class
        """
        context = kwargs.get('context', {})
        if config_section:
            context['config_section'] = config_section
        if config_key:
            context['config_key'] = config_key

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'CONFIGURATION')
        super().__init__(message, **kwargs)

        self.config_section = config_section
        self.config_key = config_key


class AnalysisTimeoutError(ProviderError):
    """Exception for a provider call that did not finish within its deadline."""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if timeout is not None:
            context['timeout'] = timeout

        kwargs['context'] = context
        kwargs.setdefault('error_code', 'TIMEOUT')
        super().__init__(message, **kwargs)

        self.timeout = timeout
