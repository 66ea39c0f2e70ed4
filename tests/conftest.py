import json
import shutil
from pathlib import Path

import pytest

from manifest_provider.config import (
    AnalysisConfig, ExecutablesConfig, ProviderConfig, reset_config_manager
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"

_ENV_VARS = (
    "MATCH_MANIFEST_VERSIONS",
    "PROVIDER_IGNORE_MARKER",
    "PROVIDER_MVN_PATH",
    "PROVIDER_NPM_PATH",
    "PROVIDER_GO_PATH",
    "PROVIDER_PIP3_PATH",
    "PROVIDER_PYTHON3_PATH",
    "PROVIDER_PREFER_MVNW",
    "LOG_LEVEL",
    "LOG_FILE",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep tests independent of the caller's environment and of each other."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def make_config():
    """Build a ProviderConfig with analysis options and executable overrides."""
    def _make(match_manifest_versions=True, ignore_marker="manifestignore", **executables):
        executables.setdefault("prefer_mvnw", False)
        return ProviderConfig(
            analysis=AnalysisConfig(
                match_manifest_versions=match_manifest_versions,
                ignore_marker=ignore_marker
            ),
            executables=ExecutablesConfig(**executables)
        )
    return _make


@pytest.fixture
def project_dir(tmp_path):
    """Copy a fixture project into a temporary directory and return its path."""
    def _copy(name):
        target = tmp_path / name
        shutil.copytree(FIXTURES_DIR / "projects" / name, target)
        return target
    return _copy


@pytest.fixture
def tool_output():
    """Read a recorded package manager output."""
    def _read(ecosystem, name):
        return (FIXTURES_DIR / "outputs" / ecosystem / name).read_text(encoding="utf-8")
    return _read


@pytest.fixture
def load_bom():
    """Decode the CycloneDX document carried by a Content."""
    def _load(content):
        return json.loads(content.buffer.decode("utf-8"))
    return _load


def component_purls(bom):
    return {component["purl"] for component in bom["components"]}


def depends_on(bom, ref):
    for entry in bom["dependencies"]:
        if entry["ref"] == ref:
            return entry["dependsOn"]
    raise KeyError(ref)


@pytest.fixture
def bom_helpers():
    """Accessors for purls and edges of a decoded CycloneDX document."""
    class _Helpers:
        purls = staticmethod(component_purls)
        depends_on = staticmethod(depends_on)
    return _Helpers
