"""
Go modules provider for go.mod manifests.
"""

import logging
import re
from collections import defaultdict, deque
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..config import ProviderConfig
from ..error_handling import ExecutableResolutionError, ManifestReadError, VersionMismatchError
from ..models import Dependency, DependencyGraph, Ecosystem
from ..tools import find_executable, is_executable, run_command
from .base_provider import Content, Provider

logger = logging.getLogger(__name__)

# pseudo-modules `go mod graph` reports for the language and toolchain versions
_PSEUDO_MODULES = {"go", "toolchain"}
_SEMVER_PATTERN = re.compile(r'^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$')


@dataclass(frozen=True)
class ModuleRequirement:
    """A ``require`` directive of a go.mod file."""
    path: str
    version: str
    indirect: bool = False
    ignored: bool = False


def semver_key(version: str) -> Tuple:
    """
    Sort key ordering Go module versions by semantic version precedence.

    Releases sort after their pre-releases; unparsable versions sort first.
    """
    match = _SEMVER_PATTERN.match(version)
    if not match:
        return (0, (), 0, ())
    major, minor, patch, prerelease = match.groups()
    numbers = (int(major), int(minor or 0), int(patch or 0))
    if prerelease is None:
        return (1, numbers, 1, ())
    identifiers = tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in prerelease.split(".")
    )
    return (1, numbers, 0, identifiers)


class GoModulesProvider(Provider):
    """
    Provider for Go modules.

    The module graph comes from ``go mod graph``; each module path is
    reduced to the highest version required anywhere in the graph, which is
    the version minimal version selection builds with.
    """

    def __init__(self, manifest: Union[str, Path], config: Optional[ProviderConfig] = None):
        super().__init__(Ecosystem.GOLANG, manifest, config)

    def provide_stack(self) -> Content:
        module_path, requirements = self._parse_go_mod()
        edges, selected = self._module_graph(module_path)
        self._check_versions(requirements, selected)

        graph = DependencyGraph(Dependency.golang(module_path, ""))
        queue = deque([(graph.root, module_path)])
        expanded = set()
        while queue:
            parent, node = queue.popleft()
            if node in expanded:
                continue
            expanded.add(node)
            for child_path in edges.get(node, []):
                version = selected[child_path]
                child = Dependency.golang(child_path, version)
                graph.add_dependency(parent, child)
                queue.append((child, f"{child_path}@{version}"))

        graph.remove_ignored(r.path for r in requirements if r.ignored)
        return self._build_content(graph)

    def provide_component(self) -> Content:
        module_path, requirements = self._parse_go_mod()
        _, selected = self._module_graph(module_path)
        self._check_versions(requirements, selected)

        graph = DependencyGraph(Dependency.golang(module_path, ""))
        for requirement in requirements:
            if requirement.indirect or requirement.ignored:
                continue
            version = selected.get(requirement.path, requirement.version)
            graph.add_direct(Dependency.golang(requirement.path, version))
        return self._build_content(graph)

    def get_executable(self, command: str) -> str:
        override = self.config.executables.go_path
        if override:
            if is_executable(override):
                return override
            raise ExecutableResolutionError(
                f"Configured go executable is not executable: {override}",
                command=command,
                candidate=override
            )

        found = find_executable(command)
        if found:
            return found

        raise ExecutableResolutionError(f"Unable to find {command} on the PATH", command=command)

    def _check_versions(self, requirements: List[ModuleRequirement], selected: Dict[str, str]) -> None:
        """Fail when a declared version lost to another one and versions must match."""
        if not self.match_manifest_versions:
            return
        for requirement in requirements:
            if requirement.ignored:
                continue
            resolved = selected.get(requirement.path)
            if resolved and resolved != requirement.version:
                raise VersionMismatchError(
                    f"Module {requirement.path} is declared as {requirement.version} in "
                    f"{self.manifest.name} but {resolved} is selected",
                    package=requirement.path,
                    declared_version=requirement.version,
                    resolved_version=resolved
                )

    def _parse_go_mod(self) -> Tuple[str, List[ModuleRequirement]]:
        """
        Read the module path and require directives from go.mod.

        Raises:
            ManifestReadError: If the file is missing or has no module directive
        """
        module_path = None
        requirements = []
        marker = self.config.analysis.ignore_marker
        in_require_block = False

        for raw_line in self._read_manifest().splitlines():
            line, _, comment = raw_line.partition("//")
            line = line.strip()

            if in_require_block:
                if line == ")":
                    in_require_block = False
                elif line:
                    requirements.append(self._requirement(line, comment, marker))
                continue

            if line.startswith("module "):
                module_path = line.split(None, 1)[1].strip().strip('"')
            elif line == "require (" or line == "require(":
                in_require_block = True
            elif line.startswith("require "):
                requirements.append(self._requirement(line[len("require "):], comment, marker))

        if not module_path:
            raise ManifestReadError(
                f"No module directive in {self.manifest}",
                manifest_path=str(self.manifest)
            )
        return module_path, requirements

    def _requirement(self, line: str, comment: str, marker: str) -> ModuleRequirement:
        parts = line.split()
        if len(parts) < 2:
            raise ManifestReadError(
                f"Malformed require directive in {self.manifest}: {line}",
                manifest_path=str(self.manifest)
            )
        annotations = comment.replace(";", " ").split()
        return ModuleRequirement(
            path=parts[0].strip('"'),
            version=parts[1],
            indirect="indirect" in annotations,
            ignored=marker in comment
        )

    def _module_graph(self, module_path: str) -> Tuple[Dict[str, List[str]], Dict[str, str]]:
        """
        Run ``go mod graph``.

        Returns:
            Adjacency lists from node (``path@version``, or the bare main module
            path) to required module paths, and the selected version per path
        """
        go = self.get_executable("go")
        output = run_command([go, "mod", "graph"], cwd=self.manifest.parent)

        edges: Dict[str, List[str]] = defaultdict(list)
        versions: Dict[str, List[str]] = defaultdict(list)

        for line in output.splitlines():
            parts = line.split()
            if len(parts) != 2:
                continue
            source, target = parts
            target_path, _, target_version = target.partition("@")
            source_path = source.partition("@")[0]
            if target_path in _PSEUDO_MODULES or source_path in _PSEUDO_MODULES:
                continue
            if target_path == module_path:
                continue
            versions[target_path].append(target_version)
            if target_path not in edges[source]:
                edges[source].append(target_path)

        selected = {
            path: max(candidates, key=semver_key)
            for path, candidates in versions.items()
        }
        logger.debug(f"Selected {len(selected)} module versions for {module_path}")
        return dict(edges), selected
