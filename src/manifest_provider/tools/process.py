"""
Blocking invocation of external package manager executables.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..error_handling import ExecutableResolutionError, ToolExecutionError

logger = logging.getLogger(__name__)


def is_executable(path: Union[str, Path]) -> bool:
    """Check that ``path`` is a regular file the current user may execute."""
    candidate = Path(path)
    return candidate.is_file() and os.access(candidate, os.X_OK)


def find_executable(command: str, env: Optional[Dict[str, str]] = None) -> Optional[str]:
    """
    Look up ``command`` on the PATH.

    Args:
        command: Executable name
        env: Environment whose PATH is searched (process environment if None)

    Returns:
        Absolute path of the executable, or None
    """
    path = (env or os.environ).get("PATH")
    return shutil.which(command, path=path)


def run_command(
    args: Sequence[str],
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None
) -> str:
    """
    Run an external command and return its standard output.

    The call blocks until the process exits; no timeout is applied here.

    Args:
        args: Command line, executable first
        cwd: Working directory
        env: Extra environment variables merged over the process environment

    Returns:
        Captured standard output

    Raises:
        ExecutableResolutionError: If the executable does not exist
        ToolExecutionError: If the process exits with a non-zero status
    """
    command_line: List[str] = [str(arg) for arg in args]
    process_env = None
    if env:
        process_env = os.environ.copy()
        process_env.update(env)

    logger.debug(f"Running: {' '.join(command_line)} (cwd={cwd})")

    try:
        completed = subprocess.run(
            command_line,
            cwd=str(cwd) if cwd else None,
            env=process_env,
            capture_output=True,
            text=True,
            check=False
        )
    except FileNotFoundError as e:
        raise ExecutableResolutionError(
            f"Executable not found: {command_line[0]}",
            command=command_line[0],
            cause=e
        ) from e
    except PermissionError as e:
        raise ExecutableResolutionError(
            f"Executable is not accessible: {command_line[0]}",
            command=command_line[0],
            cause=e
        ) from e

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        raise ToolExecutionError(
            f"Command failed with exit code {completed.returncode}: {stderr or 'no error output'}",
            command=" ".join(command_line),
            exit_code=completed.returncode,
            stderr=stderr
        )

    return completed.stdout
