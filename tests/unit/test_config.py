import pytest
import yaml

from manifest_provider.config import (
    ConfigManager, ProviderConfig, get_config, get_config_manager, reset_config_manager
)
from manifest_provider.error_handling import ConfigurationError

# --- Defaults ---

def test_default_config():
    config = ConfigManager().load_config()
    assert config == ProviderConfig()
    assert config.analysis.match_manifest_versions is True
    assert config.analysis.ignore_marker == "manifestignore"
    assert config.executables.mvn_path is None
    assert config.executables.prefer_mvnw is True
    assert config.logging.level == "INFO"


# --- Environment variables ---

@pytest.mark.parametrize("value, expected", [
    ("false", False),
    ("FALSE", False),
    ("0", False),
    ("true", True),
    ("yes", True),
])
def test_match_manifest_versions_from_env(monkeypatch, value, expected):
    monkeypatch.setenv("MATCH_MANIFEST_VERSIONS", value)
    assert ConfigManager().load_config().analysis.match_manifest_versions is expected


def test_invalid_match_manifest_versions_from_env(monkeypatch):
    monkeypatch.setenv("MATCH_MANIFEST_VERSIONS", "sometimes")
    with pytest.raises(ConfigurationError) as exc_info:
        ConfigManager().load_config()
    assert exc_info.value.config_key == "match_manifest_versions"


def test_executable_overrides_from_env(monkeypatch):
    monkeypatch.setenv("PROVIDER_MVN_PATH", "/opt/maven/bin/mvn")
    monkeypatch.setenv("PROVIDER_PREFER_MVNW", "off")
    monkeypatch.setenv("PROVIDER_IGNORE_MARKER", "sbom-ignore")
    config = ConfigManager().load_config()
    assert config.executables.mvn_path == "/opt/maven/bin/mvn"
    assert config.executables.prefer_mvnw is False
    assert config.analysis.ignore_marker == "sbom-ignore"


def test_log_level_is_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert ConfigManager().load_config().logging.level == "DEBUG"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ConfigurationError):
        ConfigManager().load_config()


# --- Configuration file ---

def test_yaml_file_is_loaded(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.safe_dump({
        "analysis": {"match_manifest_versions": False},
        "executables": {"npm_path": "/usr/local/bin/npm"},
    }))
    config = ConfigManager(config_file).load_config()
    assert config.analysis.match_manifest_versions is False
    assert config.analysis.ignore_marker == "manifestignore"
    assert config.executables.npm_path == "/usr/local/bin/npm"


def test_env_overrides_file(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("analysis:\n  match_manifest_versions: false\n")
    monkeypatch.setenv("MATCH_MANIFEST_VERSIONS", "true")
    assert ConfigManager(config_file).load_config().analysis.match_manifest_versions is True


def test_env_var_substitution(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("executables:\n  go_path: ${GO_BINARY}\n")
    monkeypatch.setenv("GO_BINARY", "/usr/lib/go/bin/go")
    assert ConfigManager(config_file).load_config().executables.go_path == "/usr/lib/go/bin/go"


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "missing.yaml").load_config()


def test_unknown_section(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("github:\n  token: abc\n")
    with pytest.raises(ConfigurationError) as exc_info:
        ConfigManager(config_file).load_config()
    assert exc_info.value.config_section == "github"


def test_unknown_key(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("analysis:\n  include_dev: true\n")
    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_section_must_be_mapping(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("analysis: true\n")
    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()



# --- Global manager ---

def test_global_config_is_cached(monkeypatch):
    first = get_config()
    monkeypatch.setenv("MATCH_MANIFEST_VERSIONS", "false")
    assert get_config() is first
    reset_config_manager()
    assert get_config().analysis.match_manifest_versions is False


def test_global_manager_is_shared(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("analysis:\n  ignore_marker: skip-me\n")
    manager = get_config_manager(config_file)
    assert get_config_manager() is manager
    assert get_config().analysis.ignore_marker == "skip-me"
