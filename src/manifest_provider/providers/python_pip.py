"""
pip provider for requirements.txt manifests.
"""

import logging
import os
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from packaging.requirements import InvalidRequirement, Requirement as ParsedRequirement
from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion

from ..config import ProviderConfig
from ..error_handling import (
    DependencyResolutionError, ExecutableResolutionError, VersionMismatchError
)
from ..models import Dependency, DependencyGraph, Ecosystem, normalize_python_name
from ..tools import find_executable, is_executable, run_command
from .base_provider import Content, Provider

logger = logging.getLogger(__name__)

# pip only treats '#' as a comment at the start of a line or after whitespace
_COMMENT_PATTERN = re.compile(r'(^|\s+)#.*$')
_OPTION_PATTERN = re.compile(r'\s+--?[A-Za-z].*$')
_VCS_PREFIXES = ('git+', 'hg+', 'svn+', 'bzr+', 'http://', 'https://', 'file:')


@dataclass(frozen=True)
class Requirement:
    """A single requirement of a requirements file."""
    name: str
    version_spec: str = ""
    line_number: int = 0
    ignored: bool = False

    @property
    def pinned_version(self) -> Optional[str]:
        """Version for a single ``==`` pin (wildcards included), None otherwise."""
        specifiers = list(SpecifierSet(self.version_spec))
        if len(specifiers) == 1 and specifiers[0].operator == "==":
            return specifiers[0].version
        return None

    def accepts(self, version: str) -> bool:
        """Whether ``version`` satisfies the version spec under PEP 440 rules."""
        try:
            return SpecifierSet(self.version_spec).contains(version, prereleases=True)
        except InvalidVersion:
            return self.pinned_version == version


@dataclass
class InstalledPackage:
    """A distribution installed in the Python environment."""
    name: str
    version: str
    requires: List[str] = field(default_factory=list)


class PipProvider(Provider):
    """
    Provider for pip requirements files.

    Versions are taken from the packages installed in the Python environment
    pip runs in; transitive dependencies follow the ``Requires`` metadata
    reported by ``pip show``.
    """

    def __init__(self, manifest: Union[str, Path], config: Optional[ProviderConfig] = None):
        super().__init__(Ecosystem.PYTHON, manifest, config)

    def provide_stack(self) -> Content:
        requirements = self._parse_requirements()
        installed = self._installed_packages()
        graph = self._new_graph()

        queue = deque()
        for requirement in self._active(requirements):
            dependency = self._resolve(requirement, installed)
            graph.add_direct(dependency)
            queue.append(dependency)

        visited = set()
        while queue:
            parent = queue.popleft()
            if parent.bom_ref in visited:
                continue
            visited.add(parent.bom_ref)
            for required_name in installed[parent.name].requires:
                package = installed.get(required_name)
                if package is None:
                    raise DependencyResolutionError(
                        f"Package {required_name} required by {parent.name} is not installed",
                        package=required_name
                    )
                child = Dependency.python(package.name, package.version)
                graph.add_dependency(parent, child)
                queue.append(child)

        graph.remove_ignored(r.name for r in requirements if r.ignored)
        return self._build_content(graph)

    def provide_component(self) -> Content:
        requirements = self._parse_requirements()
        installed = self._installed_packages()
        graph = self._new_graph()

        for requirement in self._active(requirements):
            graph.add_direct(self._resolve(requirement, installed))

        return self._build_content(graph)

    def get_executable(self, command: str) -> str:
        overrides = {
            "pip3": self.config.executables.pip3_path,
            "python3": self.config.executables.python3_path,
        }
        override = overrides.get(command)
        if override:
            if is_executable(override):
                return override
            raise ExecutableResolutionError(
                f"Configured {command} executable is not executable: {override}",
                command=command,
                candidate=override
            )

        venv_candidate = self._virtualenv_executable(command)
        if venv_candidate is not None:
            return str(venv_candidate)

        for name in (command, command.rstrip("3")):
            found = find_executable(name)
            if found:
                return found

        raise ExecutableResolutionError(f"Unable to find {command} on the PATH", command=command)

    def _virtualenv_executable(self, command: str) -> Optional[Path]:
        """Look for ``command`` in a ``.venv`` next to the manifest."""
        if os.name == "nt":
            candidate = self.manifest.parent / ".venv" / "Scripts" / f"{command.rstrip('3')}.exe"
        else:
            candidate = self.manifest.parent / ".venv" / "bin" / command
        return candidate if is_executable(candidate) else None

    def _pip_command(self) -> List[str]:
        """Command prefix for running pip, falling back to ``python3 -m pip``."""
        try:
            return [self.get_executable("pip3")]
        except ExecutableResolutionError:
            logger.debug("pip3 not found, falling back to python3 -m pip")
            return [self.get_executable("python3"), "-m", "pip"]

    def _new_graph(self) -> DependencyGraph:
        project = self.manifest.resolve().parent.name or "root"
        return DependencyGraph(Dependency.python(project, ""))

    def _active(self, requirements: List[Requirement]) -> List[Requirement]:
        return [requirement for requirement in requirements if not requirement.ignored]

    def _resolve(self, requirement: Requirement, installed: Dict[str, InstalledPackage]) -> Dependency:
        """
        Match a requirement against the installed packages.

        Raises:
            DependencyResolutionError: If the requirement is not installed
            VersionMismatchError: If versions must match and the pin differs
        """
        package = installed.get(requirement.name)
        if package is None:
            raise DependencyResolutionError(
                f"Package {requirement.name} from {self.manifest.name} line "
                f"{requirement.line_number} is not installed",
                package=requirement.name
            )

        pinned = requirement.pinned_version
        if self.match_manifest_versions and pinned and not requirement.accepts(package.version):
            raise VersionMismatchError(
                f"Installed version {package.version} of {requirement.name} does not match "
                f"manifest version {pinned}",
                package=requirement.name,
                declared_version=pinned,
                resolved_version=package.version
            )

        return Dependency.python(package.name, package.version)

    def _parse_requirements(self) -> List[Requirement]:
        """
        Parse the requirements file.

        Options (``-r``, ``-e``, ``--index-url``...), per-requirement options
        such as ``--hash`` and direct URL references are skipped. Requirements
        whose environment marker does not hold for the running interpreter
        are dropped; a comment containing the ignore marker excludes the line.
        """
        requirements = []
        marker = self.config.analysis.ignore_marker

        for line_number, line, comment in self._logical_lines(self._read_manifest()):
            if not line or line.startswith('-'):
                continue
            if line.startswith(_VCS_PREFIXES):
                logger.warning(f"Skipping direct reference on line {line_number} of {self.manifest.name}: {line}")
                continue

            try:
                parsed = ParsedRequirement(_OPTION_PATTERN.sub('', line))
            except InvalidRequirement as e:
                logger.warning(f"Unable to parse line {line_number} of {self.manifest.name}: {e}")
                continue

            if parsed.url:
                logger.warning(f"Skipping direct reference on line {line_number} of {self.manifest.name}: {line}")
                continue
            if parsed.marker is not None and not parsed.marker.evaluate():
                logger.debug(f"Skipping {parsed.name}, marker '{parsed.marker}' does not apply")
                continue

            requirements.append(Requirement(
                name=normalize_python_name(parsed.name),
                version_spec=str(parsed.specifier),
                line_number=line_number,
                ignored=marker in comment
            ))

        logger.debug(f"Parsed {len(requirements)} requirements from {self.manifest.name}")
        return requirements

    @staticmethod
    def _logical_lines(text: str) -> Iterator[Tuple[int, str, str]]:
        """Yield ``(first line number, line, comments)`` with ``\\`` continuations joined."""
        parts: List[str] = []
        comments: List[str] = []
        start = 0

        for line_number, raw_line in enumerate(text.splitlines(), 1):
            if not parts:
                start = line_number
            comment = _COMMENT_PATTERN.search(raw_line)
            if comment:
                comments.append(comment.group().strip())
                raw_line = raw_line[:comment.start()]

            line = raw_line.rstrip()
            if line.endswith('\\'):
                parts.append(line[:-1])
                continue

            parts.append(line)
            yield start, ' '.join(parts).strip(), ' '.join(comments)
            parts, comments = [], []

        if parts:
            yield start, ' '.join(parts).strip(), ' '.join(comments)

    def _installed_packages(self) -> Dict[str, InstalledPackage]:
        """Read every installed distribution with its requirements, keyed by normalized name."""
        pip = self._pip_command()
        freeze_output = run_command(pip + ["freeze", "--all"], cwd=self.manifest.parent)

        names = []
        for line in freeze_output.splitlines():
            line = line.strip()
            if not line or line.startswith(('#', '-e')):
                continue
            name = re.split(r'\s*(?:==|===| @ )', line, maxsplit=1)[0].strip()
            if name:
                names.append(name)

        if not names:
            return {}

        show_output = run_command(pip + ["show"] + names, cwd=self.manifest.parent)
        return self._parse_pip_show(show_output)

    @staticmethod
    def _parse_pip_show(output: str) -> Dict[str, InstalledPackage]:
        packages: Dict[str, InstalledPackage] = {}

        for block in re.split(r'^---\s*$', output, flags=re.MULTILINE):
            fields: Dict[str, str] = {}
            for line in block.splitlines():
                key, separator, value = line.partition(':')
                if separator and not line.startswith(' '):
                    fields[key.strip()] = value.strip()

            name = fields.get("Name")
            if not name:
                continue
            requires = [
                normalize_python_name(item)
                for item in fields.get("Requires", "").split(',')
                if item.strip()
            ]
            packages[normalize_python_name(name)] = InstalledPackage(
                name=name, version=fields.get("Version", ""), requires=requires
            )

        return packages
