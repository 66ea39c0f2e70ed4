"""
Data models for the manifest provider system.
"""

from .ecosystem import Ecosystem
from .dependency import Dependency, normalize_python_name
from .dependency_graph import DependencyGraph

__all__ = [
    "Ecosystem",
    "Dependency",
    "DependencyGraph",
    "normalize_python_name"
]
