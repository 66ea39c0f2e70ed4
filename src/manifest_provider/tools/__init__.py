"""
Helpers for running external package manager tools.
"""

from .process import run_command, find_executable, is_executable

__all__ = [
    "run_command",
    "find_executable",
    "is_executable"
]
