"""
Selection of the provider variant for a manifest.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Type, Union

from ..config import ProviderConfig
from ..models import Ecosystem
from .base_provider import Provider
from .golang_gomodules import GoModulesProvider
from .java_maven import MavenProvider
from .javascript_npm import NpmProvider
from .python_pip import PipProvider

logger = logging.getLogger(__name__)

_PROVIDERS: Dict[Ecosystem, Type[Provider]] = {
    Ecosystem.MAVEN: MavenProvider,
    Ecosystem.NPM: NpmProvider,
    Ecosystem.GOLANG: GoModulesProvider,
    Ecosystem.PYTHON: PipProvider,
}


def register_provider(ecosystem: Ecosystem, provider_cls: Type[Provider]) -> None:
    """
    Register the provider class used for an ecosystem.

    Args:
        ecosystem: Ecosystem the class handles
        provider_cls: Provider subclass taking ``(manifest, config)``
    """
    if not issubclass(provider_cls, Provider):
        raise TypeError(f"{provider_cls!r} is not a Provider subclass")
    _PROVIDERS[ecosystem] = provider_cls
    logger.debug(f"Registered {provider_cls.__name__} for {ecosystem.value}")


def get_provider(manifest: Union[str, Path], config: Optional[ProviderConfig] = None) -> Provider:
    """
    Create a new provider for a manifest.

    Args:
        manifest: Path to the manifest file
        config: Provider configuration (process configuration if None)

    Returns:
        A fresh provider bound to the manifest

    Raises:
        UnsupportedManifestError: If no provider handles the manifest
    """
    ecosystem = Ecosystem.from_manifest(manifest)
    provider = _PROVIDERS[ecosystem](Path(manifest), config)
    logger.debug(f"Created {provider!r}")
    return provider
