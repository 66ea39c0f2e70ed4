import os
import subprocess

import pytest

from manifest_provider.error_handling import ExecutableResolutionError, ToolExecutionError
from manifest_provider.tools import find_executable, is_executable, run_command

posix_only = pytest.mark.skipif(os.name == "nt", reason="relies on POSIX permission bits")


@pytest.fixture
def mock_run(mocker):
    return mocker.patch("manifest_provider.tools.process.subprocess.run")


# --- run_command ---

def test_run_command_returns_stdout(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess(["go"], 0, stdout="graph output", stderr="")

    assert run_command(["go", "mod", "graph"], cwd=tmp_path) == "graph output"

    args, kwargs = mock_run.call_args
    assert args[0] == ["go", "mod", "graph"]
    assert kwargs["cwd"] == str(tmp_path)
    assert kwargs["capture_output"] is True
    assert kwargs["check"] is False
    assert kwargs["env"] is None


def test_run_command_merges_environment(mock_run, monkeypatch):
    monkeypatch.setenv("EXISTING_VAR", "kept")
    mock_run.return_value = subprocess.CompletedProcess(["npm"], 0, stdout="", stderr="")

    run_command(["npm", "ls"], env={"NPM_CONFIG_LOGLEVEL": "silent"})

    env = mock_run.call_args.kwargs["env"]
    assert env["NPM_CONFIG_LOGLEVEL"] == "silent"
    assert env["EXISTING_VAR"] == "kept"


def test_run_command_non_zero_exit(mock_run):
    mock_run.return_value = subprocess.CompletedProcess(
        ["mvn"], 1, stdout="", stderr="[ERROR] Non-resolvable parent POM\n"
    )

    with pytest.raises(ToolExecutionError) as exc_info:
        run_command(["mvn", "-q", "dependency:tree"])

    error = exc_info.value
    assert error.exit_code == 1
    assert error.stderr == "[ERROR] Non-resolvable parent POM"
    assert error.command == "mvn -q dependency:tree"
    assert "Non-resolvable parent POM" in error.message


def test_run_command_missing_executable(mock_run):
    mock_run.side_effect = FileNotFoundError("no such file")

    with pytest.raises(ExecutableResolutionError) as exc_info:
        run_command(["/nowhere/go", "mod", "graph"])

    assert exc_info.value.command == "/nowhere/go"
    assert isinstance(exc_info.value.cause, FileNotFoundError)


def test_run_command_permission_denied(mock_run):
    mock_run.side_effect = PermissionError("denied")

    with pytest.raises(ExecutableResolutionError):
        run_command(["./mvnw"])


# --- executable lookup ---

@posix_only
def test_is_executable(tmp_path):
    script = tmp_path / "tool"
    script.write_text("#!/bin/sh\n")
    assert not is_executable(script)
    script.chmod(0o755)
    assert is_executable(script)
    assert not is_executable(tmp_path)
    assert not is_executable(tmp_path / "missing")


@posix_only
def test_find_executable_uses_given_path(tmp_path):
    script = tmp_path / "npm"
    script.write_text("#!/bin/sh\n")
    script.chmod(0o755)

    assert find_executable("npm", env={"PATH": str(tmp_path)}) == str(script)
    assert find_executable("mvn", env={"PATH": str(tmp_path)}) is None
