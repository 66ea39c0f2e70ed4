import pytest

from manifest_provider.error_handling import UnsupportedManifestError
from manifest_provider.models import Ecosystem
from manifest_provider.providers import (
    GoModulesProvider, MavenProvider, NpmProvider, PipProvider, get_provider, register_provider
)
from manifest_provider.providers import provider_factory


@pytest.mark.parametrize("manifest, expected", [
    ("pom.xml", MavenProvider),
    ("package.json", NpmProvider),
    ("go.mod", GoModulesProvider),
    ("requirements.txt", PipProvider),
])
def test_get_provider(tmp_path, make_config, manifest, expected):
    provider = get_provider(tmp_path / manifest, make_config())
    assert type(provider) is expected
    assert provider.manifest == tmp_path / manifest


def test_get_provider_returns_fresh_instances(tmp_path, make_config):
    first = get_provider(tmp_path / "pom.xml", make_config())
    second = get_provider(tmp_path / "pom.xml", make_config())
    assert first is not second


def test_get_provider_unsupported(tmp_path, make_config):
    with pytest.raises(UnsupportedManifestError):
        get_provider(tmp_path / "Cargo.toml", make_config())


def test_register_provider(monkeypatch, tmp_path, make_config):
    monkeypatch.setitem(provider_factory._PROVIDERS, Ecosystem.NPM, NpmProvider)

    class WorkspaceNpmProvider(NpmProvider):
        pass

    register_provider(Ecosystem.NPM, WorkspaceNpmProvider)
    assert type(get_provider(tmp_path / "package.json", make_config())) is WorkspaceNpmProvider


def test_register_provider_rejects_non_providers():
    with pytest.raises(TypeError):
        register_provider(Ecosystem.NPM, dict)
