"""
Dependency data model for packages resolved from a manifest.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import quote

from .ecosystem import Ecosystem


def normalize_python_name(name: str) -> str:
    """Normalize a Python distribution name (PEP 503)."""
    return "-".join(part for part in name.replace("_", "-").replace(".", "-").lower().split("-") if part)


@dataclass(frozen=True)
class Dependency:
    """
    Represents a single package in a dependency graph.

    Maven components keep their group id in ``namespace``, scoped npm
    packages their ``@scope`` and Go modules everything before the last
    path element of the module path.
    """

    name: str
    version: str
    ecosystem: Ecosystem
    namespace: Optional[str] = None
    scope: Optional[str] = None

    def __post_init__(self):
        """Post-initialization validation."""
        if not self.name:
            raise ValueError("Dependency name must not be empty")
        if isinstance(self.ecosystem, str):
            object.__setattr__(self, "ecosystem", Ecosystem(self.ecosystem))

    @property
    def full_name(self) -> str:
        """Name as written in the ecosystem's manifests."""
        if not self.namespace:
            return self.name
        if self.ecosystem is Ecosystem.MAVEN:
            return f"{self.namespace}:{self.name}"
        return f"{self.namespace}/{self.name}"

    @property
    def purl(self) -> str:
        """Package URL of this dependency."""
        purl = f"pkg:{self.ecosystem.purl_type}/"
        if self.namespace:
            namespace = "/".join(quote(part, safe="") for part in self.namespace.split("/"))
            purl += f"{namespace}/"
        purl += quote(self.name, safe="")
        if self.version:
            purl += f"@{quote(self.version, safe='.-_~')}"
        return purl

    @property
    def bom_ref(self) -> str:
        """Reference used to link this dependency inside a CycloneDX document."""
        return self.purl

    @classmethod
    def maven(cls, group_id: str, artifact_id: str, version: str, scope: Optional[str] = None) -> "Dependency":
        """Create a Maven dependency from its coordinates."""
        return cls(name=artifact_id, version=version, ecosystem=Ecosystem.MAVEN, namespace=group_id, scope=scope)

    @classmethod
    def npm(cls, package_name: str, version: str) -> "Dependency":
        """Create an npm dependency, splitting the scope off scoped names."""
        if package_name.startswith("@") and "/" in package_name:
            scope, name = package_name.split("/", 1)
            return cls(name=name, version=version, ecosystem=Ecosystem.NPM, namespace=scope)
        return cls(name=package_name, version=version, ecosystem=Ecosystem.NPM)

    @classmethod
    def golang(cls, module_path: str, version: str) -> "Dependency":
        """Create a Go module dependency from its module path."""
        namespace, _, name = module_path.rpartition("/")
        return cls(name=name, version=version, ecosystem=Ecosystem.GOLANG, namespace=namespace or None)

    @classmethod
    def python(cls, package_name: str, version: str) -> "Dependency":
        """Create a Python dependency with a normalized name."""
        return cls(name=normalize_python_name(package_name), version=version, ecosystem=Ecosystem.PYTHON)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert dependency to dictionary for serialization.

        Returns:
            Dictionary representation of the dependency
        """
        return {
            "name": self.name,
            "namespace": self.namespace,
            "version": self.version,
            "ecosystem": self.ecosystem.value,
            "scope": self.scope,
            "purl": self.purl,
        }
