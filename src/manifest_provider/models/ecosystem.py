"""
Package ecosystems supported by manifest providers.
"""

from enum import Enum
from pathlib import Path
from typing import Union

from ..error_handling import UnsupportedManifestError


class Ecosystem(Enum):
    """Supported package ecosystems, one per provider variant."""
    MAVEN = "maven"
    NPM = "npm"
    GOLANG = "golang"
    PYTHON = "pip"

    @property
    def manifest_name(self) -> str:
        """File name of the manifest this ecosystem is read from."""
        return _MANIFEST_NAMES[self]

    @property
    def purl_type(self) -> str:
        """Package URL type used for components of this ecosystem."""
        return _PURL_TYPES[self]

    @classmethod
    def from_manifest(cls, manifest: Union[str, Path]) -> "Ecosystem":
        """
        Determine the ecosystem of a manifest file from its name.

        Args:
            manifest: Path to the manifest file

        Returns:
            Matching ecosystem

        Raises:
            UnsupportedManifestError: If no ecosystem uses this file name
        """
        name = Path(manifest).name
        for ecosystem, manifest_name in _MANIFEST_NAMES.items():
            if manifest_name == name:
                return ecosystem
        raise UnsupportedManifestError(
            f"{name} is not a supported manifest", manifest_path=str(manifest)
        )


_MANIFEST_NAMES = {
    Ecosystem.MAVEN: "pom.xml",
    Ecosystem.NPM: "package.json",
    Ecosystem.GOLANG: "go.mod",
    Ecosystem.PYTHON: "requirements.txt",
}

_PURL_TYPES = {
    Ecosystem.MAVEN: "maven",
    Ecosystem.NPM: "npm",
    Ecosystem.GOLANG: "golang",
    Ecosystem.PYTHON: "pypi",
}
