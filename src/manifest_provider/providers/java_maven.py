"""
Maven provider for pom.xml manifests.
"""

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

from ..config import ProviderConfig
from ..error_handling import ExecutableResolutionError, ManifestReadError, ToolExecutionError
from ..models import Dependency, DependencyGraph, Ecosystem
from ..tools import find_executable, is_executable, run_command
from .base_provider import Content, Provider

logger = logging.getLogger(__name__)

_TREE_PREFIX_CHARS = " |+-\\"
_EXCLUDED_SCOPES = {"test"}


class MavenProvider(Provider):
    """
    Provider for Maven projects.

    Component content is taken from the effective POM, so inherited and
    managed versions are resolved by Maven itself. Stack content comes from
    ``mvn dependency:tree``. Test scoped dependencies are left out of both.
    """

    def __init__(self, manifest: Union[str, Path], config: Optional[ProviderConfig] = None):
        super().__init__(Ecosystem.MAVEN, manifest, config)

    def provide_stack(self) -> Content:
        ignored = self._ignored_dependencies()
        mvn = self.get_executable("mvn")

        with tempfile.TemporaryDirectory(prefix="manifest-provider-") as tmp_dir:
            tree_file = Path(tmp_dir) / "dependency-tree.txt"
            run_command(
                [mvn, "-q", "dependency:tree", "-Dverbose", "-DoutputType=text",
                 f"-DoutputFile={tree_file}", "-f", str(self.manifest)],
                cwd=self.manifest.parent
            )
            tree_text = self._read_tool_output(tree_file)

        graph = self._parse_dependency_tree(tree_text)
        graph.remove_ignored(ignored)
        return self._build_content(graph)

    def provide_component(self) -> Content:
        ignored = self._ignored_dependencies()
        mvn = self.get_executable("mvn")

        with tempfile.TemporaryDirectory(prefix="manifest-provider-") as tmp_dir:
            effective_pom = Path(tmp_dir) / "effective-pom.xml"
            run_command(
                [mvn, "-q", "help:effective-pom", f"-Doutput={effective_pom}",
                 "-f", str(self.manifest)],
                cwd=self.manifest.parent
            )
            pom_text = self._read_tool_output(effective_pom)

        graph = self._parse_effective_pom(pom_text)
        graph.remove_ignored(ignored)
        return self._build_content(graph)

    def get_executable(self, command: str) -> str:
        override = self.config.executables.mvn_path
        if override:
            if is_executable(override):
                return override
            raise ExecutableResolutionError(
                f"Configured Maven executable is not executable: {override}",
                command=command,
                candidate=override
            )

        if self.config.executables.prefer_mvnw:
            wrapper = self._find_wrapper()
            if wrapper is not None:
                logger.debug(f"Using Maven wrapper {wrapper}")
                return str(wrapper)

        found = find_executable(command)
        if found:
            return found

        raise ExecutableResolutionError(
            f"Unable to find {command} on the PATH or a Maven wrapper next to {self.manifest}",
            command=command
        )

    def _find_wrapper(self) -> Optional[Path]:
        """Find an executable mvnw in the manifest directory or one of its parents."""
        wrapper_name = "mvnw.cmd" if os.name == "nt" else "mvnw"
        start = self.manifest.resolve().parent
        for directory in [start, *start.parents]:
            candidate = directory / wrapper_name
            if is_executable(candidate):
                return candidate
        return None

    def _read_tool_output(self, output_file: Path) -> str:
        if not output_file.is_file():
            raise ToolExecutionError(
                f"Maven did not produce {output_file.name} for {self.manifest}",
                command="mvn"
            )
        return output_file.read_text(encoding="utf-8")

    def _ignored_dependencies(self) -> Set[str]:
        """
        Collect ``groupId:artifactId`` of dependencies marked as ignored in the pom.

        Raises:
            ManifestReadError: If the pom is missing or not valid XML
        """
        root = self._parse_xml(self._read_manifest(), keep_comments=True)
        marker = self.config.analysis.ignore_marker
        ignored = set()

        dependencies = self._child(root, "dependencies")
        if dependencies is None:
            return ignored

        for dep_element in dependencies:
            if dep_element.tag is ET.Comment or self._local_name(dep_element.tag) != "dependency":
                continue
            if any(
                child.tag is ET.Comment and marker in (child.text or "")
                for child in dep_element
            ):
                group_id = self._child_text(dep_element, "groupId")
                artifact_id = self._child_text(dep_element, "artifactId")
                if group_id and artifact_id:
                    ignored.add(f"{group_id}:{artifact_id}")

        if ignored:
            logger.info(f"Ignoring {len(ignored)} dependencies marked in {self.manifest.name}")
        return ignored

    def _parse_effective_pom(self, pom_text: str) -> DependencyGraph:
        """Build a graph holding the root project and its non-test dependencies."""
        root = self._parse_xml(pom_text, keep_comments=False)
        if self._local_name(root.tag) == "projects":
            projects = [child for child in root if self._local_name(child.tag) == "project"]
            if not projects:
                raise ToolExecutionError("Effective POM contains no project", command="mvn")
            root = projects[0]

        parent = self._child(root, "parent")
        group_id = self._child_text(root, "groupId") or (self._child_text(parent, "groupId") if parent is not None else None)
        version = self._child_text(root, "version") or (self._child_text(parent, "version") if parent is not None else None)
        artifact_id = self._child_text(root, "artifactId")
        if not artifact_id:
            raise ManifestReadError("Effective POM has no artifactId", manifest_path=str(self.manifest))

        graph = DependencyGraph(Dependency.maven(group_id or artifact_id, artifact_id, version or ""))

        dependencies = self._child(root, "dependencies")
        if dependencies is None:
            return graph

        for dep_element in dependencies:
            if self._local_name(dep_element.tag) != "dependency":
                continue
            scope = self._child_text(dep_element, "scope") or "compile"
            if scope in _EXCLUDED_SCOPES:
                continue
            dep_group = self._child_text(dep_element, "groupId")
            dep_artifact = self._child_text(dep_element, "artifactId")
            if not dep_group or not dep_artifact:
                continue
            graph.add_direct(Dependency.maven(
                dep_group, dep_artifact, self._child_text(dep_element, "version") or "", scope
            ))

        return graph

    def _parse_dependency_tree(self, tree_text: str) -> DependencyGraph:
        """
        Parse ``dependency:tree`` text output.

        Each level of the tree is indented by three characters. Lines in
        parentheses are verbose-mode duplicates or conflicts and are skipped,
        as are test scoped nodes and their subtrees.
        """
        graph: Optional[DependencyGraph] = None
        parents: List[Dependency] = []
        skip_below: Optional[int] = None

        for raw_line in tree_text.splitlines():
            if not raw_line.strip():
                continue
            depth, entry = self._split_tree_line(raw_line)

            if graph is None:
                group_id, artifact_id, version, _ = self._parse_coordinates(entry, is_root=True)
                graph = DependencyGraph(Dependency.maven(group_id, artifact_id, version))
                parents = [graph.root]
                continue
            if depth == 0:
                # a second module tree; only the first project is analyzed
                break

            if skip_below is not None:
                if depth > skip_below:
                    continue
                skip_below = None

            if entry.startswith("("):
                continue

            group_id, artifact_id, version, scope = self._parse_coordinates(entry)
            if scope in _EXCLUDED_SCOPES:
                skip_below = depth
                continue

            dependency = Dependency.maven(group_id, artifact_id, version, scope)
            del parents[depth:]
            if len(parents) < depth:
                raise ToolExecutionError(f"Malformed dependency tree line: {raw_line}", command="mvn")
            graph.add_dependency(parents[depth - 1], dependency)
            parents.append(dependency)

        if graph is None:
            raise ToolExecutionError(f"Empty dependency tree for {self.manifest}", command="mvn")
        return graph

    @staticmethod
    def _split_tree_line(line: str) -> Tuple[int, str]:
        stripped = line.lstrip(_TREE_PREFIX_CHARS)
        prefix_length = len(line) - len(stripped)
        return prefix_length // 3, stripped.strip()

    @staticmethod
    def _parse_coordinates(entry: str, is_root: bool = False) -> Tuple[str, str, str, Optional[str]]:
        """
        Split ``group:artifact:type[:classifier]:version[:scope]``.

        Returns:
            Tuple of group id, artifact id, version and scope (None for the root)
        """
        coordinates = entry.split(" ", 1)[0]
        parts = coordinates.split(":")
        if is_root:
            if len(parts) < 4:
                raise ToolExecutionError(f"Malformed root coordinates: {entry}", command="mvn")
            return parts[0], parts[1], parts[-1], None
        if len(parts) < 5:
            raise ToolExecutionError(f"Malformed dependency coordinates: {entry}", command="mvn")
        return parts[0], parts[1], parts[-2], parts[-1]

    def _parse_xml(self, text: str, keep_comments: bool) -> ET.Element:
        try:
            if keep_comments:
                parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
                return ET.fromstring(text, parser=parser)
            return ET.fromstring(text)
        except ET.ParseError as e:
            raise ManifestReadError(
                f"Invalid XML in {self.manifest}: {e}",
                manifest_path=str(self.manifest),
                cause=e
            ) from e

    @staticmethod
    def _local_name(tag) -> str:
        """Strip the XML namespace from an element tag."""
        if not isinstance(tag, str):
            return ""
        return tag.split("}", 1)[1] if tag.startswith("{") else tag

    def _child(self, parent: ET.Element, name: str) -> Optional[ET.Element]:
        for child in parent:
            if self._local_name(child.tag) == name:
                return child
        return None

    def _child_text(self, parent: ET.Element, name: str) -> Optional[str]:
        child = self._child(parent, name)
        if child is None or child.text is None:
            return None
        return child.text.strip() or None
