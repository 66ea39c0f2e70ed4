"""
Base classes and interfaces for manifest providers.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import ProviderConfig, get_config
from ..error_handling import ManifestReadError, LockFileMissingError
from ..generators import CycloneDXFormatter
from ..models import Ecosystem, DependencyGraph

logger = logging.getLogger(__name__)

PROP_MATCH_MANIFEST_VERSIONS = "MATCH_MANIFEST_VERSIONS"


@dataclass(frozen=True)
class Content:
    """
    Request body produced by a provider.

    Aggregates the serialized body and its content type; both are used to
    construct the backend analysis request.
    """

    buffer: bytes
    type: str

    def __post_init__(self):
        """Validate both fields are present."""
        if not isinstance(self.buffer, (bytes, bytearray)):
            raise TypeError(f"Content buffer must be bytes, got {type(self.buffer).__name__}")
        if isinstance(self.buffer, bytearray):
            object.__setattr__(self, "buffer", bytes(self.buffer))
        if not self.type:
            raise ValueError("Content type must not be empty")


class Provider(ABC):
    """
    Abstract base class for ecosystem-specific manifest providers.

    A provider is bound to one manifest and one ecosystem for its whole
    lifetime and produces a fresh ``Content`` on every call. Content
    generation is blocking and may run external package manager tools;
    callers impose any timeout.
    """

    def __init__(
        self,
        ecosystem: Ecosystem,
        manifest: Union[str, Path],
        config: Optional[ProviderConfig] = None
    ):
        """
        Initialize the provider.

        Args:
            ecosystem: Ecosystem handled by this provider
            manifest: Path to the manifest file
            config: Provider configuration (process configuration if None)
        """
        self._ecosystem = ecosystem
        self._manifest = Path(manifest)
        self._config = config if config is not None else get_config()
        self._formatter = CycloneDXFormatter()

    @property
    def ecosystem(self) -> Ecosystem:
        """The ecosystem of this provider, i.e. maven."""
        return self._ecosystem

    @property
    def manifest(self) -> Path:
        """Path of the manifest this provider reads."""
        return self._manifest

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def match_manifest_versions(self) -> bool:
        """Whether resolved versions must equal the versions declared in the manifest."""
        return self._config.analysis.match_manifest_versions

    @abstractmethod
    def provide_stack(self) -> "Content":
        """
        Provide content for a stack analysis request.

        Returns:
            Content with every dependency of the manifest's dependency tree

        Raises:
            ManifestReadError: If the manifest cannot be loaded
        """

    @abstractmethod
    def provide_component(self) -> "Content":
        """
        Provide content for a component analysis request.

        Returns:
            Content with the dependencies declared directly in the manifest

        Raises:
            ManifestReadError: If the manifest cannot be loaded
        """

    def validate_lock_file(self, lock_file_dir: Union[str, Path]) -> None:
        """
        Check that a lock file required by the package manager exists.

        The default implementation does not require a lock file and never
        raises. Providers whose resolution depends on a lock file override it.

        Args:
            lock_file_dir: Directory where the lock file must exist
        """

    @abstractmethod
    def get_executable(self, command: str) -> str:
        """
        Resolve the name or path of a package manager executable.

        Resolution order is an explicit configuration override, then a
        project-local wrapper or virtual environment, then the PATH.

        Args:
            command: The command name, e.g. ``mvn``

        Returns:
            Resolved executable name or full path

        Raises:
            ExecutableResolutionError: If no usable executable is found
        """

    def _ensure_manifest(self) -> Path:
        """Return the manifest path, failing if it is not a readable file."""
        if not self._manifest.is_file():
            raise ManifestReadError(
                f"Manifest file does not exist: {self._manifest}",
                manifest_path=str(self._manifest)
            )
        return self._manifest

    def _read_manifest(self) -> str:
        """
        Read the manifest as text.

        Raises:
            ManifestReadError: If the manifest is missing or unreadable
        """
        manifest = self._ensure_manifest()
        try:
            return manifest.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestReadError(
                f"Unable to read manifest {manifest}",
                manifest_path=str(manifest),
                cause=e
            ) from e

    def _require_lock_file(self, lock_file_dir: Union[str, Path], lock_file: str, hint: str = "") -> None:
        """Raise LockFileMissingError unless ``lock_file`` exists in ``lock_file_dir``."""
        directory = Path(lock_file_dir)
        if not (directory / lock_file).is_file():
            message = f"Lock file {lock_file} does not exist in {directory}"
            if hint:
                message += f". {hint}"
            raise LockFileMissingError(message, lock_file=lock_file, lock_file_dir=str(directory))

    def _build_content(self, graph: DependencyGraph) -> Content:
        """Serialize a dependency graph into request content."""
        content = Content(self._formatter.to_bytes(graph), self._formatter.media_type)
        logger.info(
            f"Built {self._ecosystem.value} content for {self._manifest.name} "
            f"with {graph.component_count} components"
        )
        return content

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ecosystem={self._ecosystem.value!r}, manifest={str(self._manifest)!r})"
