"""
npm provider for package.json manifests.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from ..config import ProviderConfig
from ..error_handling import (
    DependencyResolutionError, ExecutableResolutionError, ManifestReadError, ToolExecutionError
)
from ..models import Dependency, DependencyGraph, Ecosystem
from ..tools import find_executable, is_executable, run_command
from .base_provider import Content, Provider

logger = logging.getLogger(__name__)

LOCK_FILE = "package-lock.json"
_DECLARED_SECTIONS = ("dependencies", "optionalDependencies", "peerDependencies")


class NpmProvider(Provider):
    """
    Provider for npm projects.

    Dependencies are read from the lock file through ``npm ls
    --package-lock-only``, so a ``package-lock.json`` is required.
    Development dependencies are omitted.
    """

    def __init__(self, manifest: Union[str, Path], config: Optional[ProviderConfig] = None):
        super().__init__(Ecosystem.NPM, manifest, config)

    def provide_stack(self) -> Content:
        package = self._load_package_json()
        listing = self._npm_ls("--all")

        graph = DependencyGraph(self._root_dependency(package, listing))
        self._add_tree(graph, graph.root, listing.get("dependencies", {}))
        graph.remove_ignored(self._ignored_packages(package))
        return self._build_content(graph)

    def provide_component(self) -> Content:
        package = self._load_package_json()
        declared = self._declared_packages(package)
        listing = self._npm_ls("--depth=0")

        graph = DependencyGraph(self._root_dependency(package, listing))
        for name, data in listing.get("dependencies", {}).items():
            if name not in declared:
                continue
            dependency = self._to_dependency(name, data)
            if dependency is not None:
                graph.add_direct(dependency)
        graph.remove_ignored(self._ignored_packages(package))
        return self._build_content(graph)

    def validate_lock_file(self, lock_file_dir: Union[str, Path]) -> None:
        self._ensure_manifest()
        self._require_lock_file(
            lock_file_dir,
            LOCK_FILE,
            hint="Run 'npm install' to generate it"
        )

    def get_executable(self, command: str) -> str:
        override = self.config.executables.npm_path
        if override:
            if is_executable(override):
                return override
            raise ExecutableResolutionError(
                f"Configured npm executable is not executable: {override}",
                command=command,
                candidate=override
            )

        found = find_executable(command)
        if found:
            return found

        raise ExecutableResolutionError(f"Unable to find {command} on the PATH", command=command)

    def _load_package_json(self) -> Dict[str, Any]:
        text = self._read_manifest()
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestReadError(
                f"Invalid JSON in {self.manifest}: {e}",
                manifest_path=str(self.manifest),
                cause=e
            ) from e
        if not isinstance(data, dict):
            raise ManifestReadError(
                f"{self.manifest} does not contain a JSON object",
                manifest_path=str(self.manifest)
            )
        return data

    def _npm_ls(self, depth_option: str) -> Dict[str, Any]:
        npm = self.get_executable("npm")
        output = run_command(
            [npm, "ls", depth_option, "--omit=dev", "--package-lock-only", "--json",
             "--prefix", str(self.manifest.parent)],
            cwd=self.manifest.parent
        )
        try:
            listing = json.loads(output or "{}")
        except json.JSONDecodeError as e:
            raise ToolExecutionError(f"npm ls returned invalid JSON: {e}", command="npm ls", cause=e) from e
        if not isinstance(listing, dict):
            raise ToolExecutionError("npm ls returned an unexpected document", command="npm ls")
        return listing

    def _root_dependency(self, package: Dict[str, Any], listing: Dict[str, Any]) -> Dependency:
        name = listing.get("name") or package.get("name") or self.manifest.parent.name
        version = listing.get("version") or package.get("version") or ""
        return Dependency.npm(name, version)

    def _add_tree(self, graph: DependencyGraph, parent: Dependency, children: Dict[str, Any]) -> None:
        for name, data in children.items():
            dependency = self._to_dependency(name, data)
            if dependency is None:
                continue
            known = dependency in graph
            graph.add_dependency(parent, dependency)
            if not known:
                self._add_tree(graph, dependency, data.get("dependencies", {}))

    def _to_dependency(self, name: str, data: Dict[str, Any]) -> Optional[Dependency]:
        version = data.get("version")
        if version:
            return Dependency.npm(name, version)
        if data.get("missing") and not (data.get("optional") or data.get("peerMissing")):
            raise DependencyResolutionError(
                f"Package {name} is missing from {LOCK_FILE}; run 'npm install'",
                package=name
            )
        logger.debug(f"Skipping unresolved optional package {name}")
        return None

    def _declared_packages(self, package: Dict[str, Any]) -> Set[str]:
        declared: Set[str] = set()
        for section in _DECLARED_SECTIONS:
            entries = package.get(section)
            if isinstance(entries, dict):
                declared.update(entries)
        return declared

    def _ignored_packages(self, package: Dict[str, Any]) -> List[str]:
        ignored = package.get(self.config.analysis.ignore_marker, [])
        if not isinstance(ignored, list):
            raise ManifestReadError(
                f"'{self.config.analysis.ignore_marker}' in {self.manifest} must be a list of package names",
                manifest_path=str(self.manifest)
            )
        return [name for name in ignored if isinstance(name, str)]
