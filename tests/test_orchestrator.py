import threading

import pytest

from manifest_provider.error_handling import (
    AnalysisTimeoutError, LockFileMissingError, ManifestReadError, UnsupportedManifestError
)
from manifest_provider.models import Dependency, DependencyGraph, Ecosystem
from manifest_provider.orchestrator import AnalysisOrchestrator, AnalysisType, ProviderResult
from manifest_provider.providers import Content, Provider, provider_factory


class RecordingProvider(Provider):
    """Provider that records calls and returns a small graph."""

    calls = []

    def __init__(self, manifest, config=None):
        super().__init__(Ecosystem.NPM, manifest, config)

    def provide_stack(self):
        self.calls.append("stack")
        return self._content()

    def provide_component(self):
        self.calls.append("component")
        return self._content()

    def validate_lock_file(self, lock_file_dir):
        self.calls.append(("validate", str(lock_file_dir)))

    def get_executable(self, command):
        return command

    def _content(self):
        self._read_manifest()
        graph = DependencyGraph(Dependency.npm("app", "1.0.0"))
        graph.add_direct(Dependency.npm("left-pad", "1.3.0"))
        return self._build_content(graph)


class BlockingProvider(RecordingProvider):
    release = threading.Event()

    def provide_stack(self):
        self.release.wait(5)
        return self._content()


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "package.json"
    path.write_text("{}")
    return path


@pytest.fixture
def use_provider(monkeypatch):
    def _use(provider_cls):
        provider_cls.calls = []
        monkeypatch.setitem(provider_factory._PROVIDERS, Ecosystem.NPM, provider_cls)
        return provider_cls
    return _use


@pytest.fixture
def orchestrator(make_config):
    return AnalysisOrchestrator(make_config())


# --- ProviderResult ---

def test_result_requires_exactly_one_outcome():
    with pytest.raises(ValueError):
        ProviderResult()
    with pytest.raises(ValueError):
        ProviderResult(content=Content(b"{}", "application/json"), error=ManifestReadError("x"))


def test_result_unwrap():
    content = Content(b"{}", "application/json")
    assert ProviderResult(content=content).unwrap() is content

    error = ManifestReadError("missing")
    result = ProviderResult(error=error)
    assert not result.ok
    with pytest.raises(ManifestReadError):
        result.unwrap()


# --- analyze ---

def test_stack_analysis(orchestrator, manifest, use_provider, load_bom):
    provider_cls = use_provider(RecordingProvider)

    result = orchestrator.analyze(manifest, AnalysisType.STACK)

    assert result.ok
    assert result.content.type == "application/vnd.cyclonedx+json"
    assert load_bom(result.content)["components"][0]["name"] == "left-pad"
    assert provider_cls.calls == [("validate", str(manifest.parent)), "stack"]


def test_component_analysis_with_lock_file_dir(orchestrator, manifest, use_provider, tmp_path):
    provider_cls = use_provider(RecordingProvider)
    lock_dir = tmp_path / "locks"

    result = orchestrator.component(manifest, lock_file_dir=lock_dir)

    assert result.ok
    assert provider_cls.calls == [("validate", str(lock_dir)), "component"]


def test_lock_file_validation_can_be_skipped(orchestrator, manifest, use_provider):
    provider_cls = use_provider(RecordingProvider)
    assert orchestrator.stack(manifest, validate_lock_file=False).ok
    assert provider_cls.calls == ["stack"]


def test_unsupported_manifest(orchestrator, tmp_path):
    result = orchestrator.analyze(tmp_path / "Gemfile", AnalysisType.STACK)
    assert isinstance(result.error, UnsupportedManifestError)


def test_missing_manifest(orchestrator, tmp_path, use_provider):
    use_provider(RecordingProvider)
    result = orchestrator.stack(tmp_path / "package.json", validate_lock_file=False)
    assert isinstance(result.error, ManifestReadError)


def test_missing_npm_manifest_reported_before_lock_file(orchestrator, tmp_path):
    result = orchestrator.stack(tmp_path / "package.json")
    assert isinstance(result.error, ManifestReadError)


def test_missing_npm_lock_file(orchestrator, manifest):
    result = orchestrator.stack(manifest)
    assert isinstance(result.error, LockFileMissingError)
    assert orchestrator.get_statistics()["last_error"]["error_type"] == "LockFileMissingError"


def test_timeout(orchestrator, manifest, use_provider):
    provider_cls = use_provider(BlockingProvider)
    provider_cls.release.clear()
    try:
        result = orchestrator.stack(manifest, timeout=0.05)
    finally:
        provider_cls.release.set()

    assert isinstance(result.error, AnalysisTimeoutError)
    assert result.error.timeout == 0.05


def test_timeout_not_reached(orchestrator, manifest, use_provider):
    use_provider(RecordingProvider)
    assert orchestrator.component(manifest, timeout=5).ok


def test_statistics(orchestrator, manifest, use_provider, tmp_path):
    use_provider(RecordingProvider)
    orchestrator.stack(manifest)
    orchestrator.stack(tmp_path / "unknown.lock")

    stats = orchestrator.get_statistics()
    assert stats["requests"] == 2
    assert stats["succeeded"] == 1
    assert stats["failed"] == 1
