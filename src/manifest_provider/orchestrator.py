"""
Orchestration of provider selection, lock file checks and content generation.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import ProviderConfig, get_config
from .error_handling import AnalysisTimeoutError, ProviderError
from .providers import Content, Provider, get_provider

logger = logging.getLogger(__name__)


class AnalysisType(Enum):
    """Kinds of analysis a request body can be produced for."""
    STACK = "stack"
    COMPONENT = "component"


@dataclass(frozen=True)
class ProviderResult:
    """
    Outcome of an analysis request: either content or the error that prevented it.
    """

    content: Optional[Content] = None
    error: Optional[ProviderError] = None

    def __post_init__(self):
        if (self.content is None) == (self.error is None):
            raise ValueError("ProviderResult needs exactly one of content or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Content:
        """Return the content, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.content


class AnalysisOrchestrator:
    """
    Coordinates a single analysis request.

    Identifies the manifest's ecosystem, creates a fresh provider for it,
    optionally validates the lock file and then asks the provider for stack
    or component content. Provider failures are returned as
    ``ProviderResult`` values instead of being raised.
    """

    def __init__(self, config: Optional[ProviderConfig] = None):
        """
        Initialize the orchestrator.

        Args:
            config: Provider configuration (process configuration if None)
        """
        self.config = config if config is not None else get_config()
        self._statistics: Dict[str, Any] = {
            "requests": 0,
            "succeeded": 0,
            "failed": 0,
            "last_error": None,
        }

    def analyze(
        self,
        manifest: Union[str, Path],
        analysis_type: AnalysisType,
        lock_file_dir: Optional[Union[str, Path]] = None,
        validate_lock_file: bool = True,
        timeout: Optional[float] = None
    ) -> ProviderResult:
        """
        Produce request content for a manifest.

        Args:
            manifest: Path to the manifest file
            analysis_type: Stack or component analysis
            lock_file_dir: Directory holding the lock file (manifest directory if None)
            validate_lock_file: Whether to run the provider's lock file check first
            timeout: Seconds to wait for content generation (no limit if None)

        Returns:
            Result holding the content or the error that prevented it
        """
        self._statistics["requests"] += 1
        started = datetime.now()
        manifest = Path(manifest)
        logger.info(f"Starting {analysis_type.value} analysis of {manifest}")

        try:
            provider = get_provider(manifest, self.config)
            if validate_lock_file:
                provider.validate_lock_file(Path(lock_file_dir) if lock_file_dir else manifest.parent)
            content = self._invoke(provider, analysis_type, timeout)
        except ProviderError as e:
            self._statistics["failed"] += 1
            self._statistics["last_error"] = e.to_dict()
            logger.error(f"{analysis_type.value.capitalize()} analysis of {manifest} failed: {e}")
            return ProviderResult(error=e)

        self._statistics["succeeded"] += 1
        elapsed = (datetime.now() - started).total_seconds()
        logger.info(
            f"Finished {analysis_type.value} analysis of {manifest} in {elapsed:.2f}s "
            f"({len(content.buffer)} bytes, {content.type})"
        )
        return ProviderResult(content=content)

    def stack(self, manifest: Union[str, Path], **kwargs) -> ProviderResult:
        """Produce stack analysis content for a manifest."""
        return self.analyze(manifest, AnalysisType.STACK, **kwargs)

    def component(self, manifest: Union[str, Path], **kwargs) -> ProviderResult:
        """Produce component analysis content for a manifest."""
        return self.analyze(manifest, AnalysisType.COMPONENT, **kwargs)

    def get_statistics(self) -> Dict[str, Any]:
        return dict(self._statistics)

    def _invoke(self, provider: Provider, analysis_type: AnalysisType, timeout: Optional[float]) -> Content:
        operation = provider.provide_stack if analysis_type is AnalysisType.STACK else provider.provide_component
        if timeout is None:
            return operation()

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="manifest-provider")
        future = executor.submit(operation)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            # the worker thread cannot be interrupted; its result is discarded
            raise AnalysisTimeoutError(
                f"{analysis_type.value.capitalize()} analysis of {provider.manifest} "
                f"did not finish within {timeout} seconds",
                timeout=timeout,
                cause=e
            ) from e
        finally:
            executor.shutdown(wait=False)
