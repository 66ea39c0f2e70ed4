"""
Manifest providers for the supported package ecosystems.
"""

from .base_provider import Provider, Content, PROP_MATCH_MANIFEST_VERSIONS
from .java_maven import MavenProvider
from .javascript_npm import NpmProvider
from .python_pip import PipProvider
from .golang_gomodules import GoModulesProvider
from .provider_factory import get_provider, register_provider

__all__ = [
    "Provider",
    "Content",
    "PROP_MATCH_MANIFEST_VERSIONS",
    "MavenProvider",
    "NpmProvider",
    "PipProvider",
    "GoModulesProvider",
    "get_provider",
    "register_provider"
]
