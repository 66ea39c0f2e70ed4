"""
Dependency graph rooted at the project a manifest describes.
"""

from collections import deque
from typing import Dict, Iterable, List

from .dependency import Dependency


class DependencyGraph:
    """
    Directed graph of dependencies rooted at the analyzed project.

    Components are kept in insertion order and keyed by their ``bom_ref``,
    so a package reached through several paths appears once.
    """

    def __init__(self, root: Dependency):
        self.root = root
        self._components: Dict[str, Dependency] = {}
        self._edges: Dict[str, List[str]] = {root.bom_ref: []}

    def add_dependency(self, parent: Dependency, child: Dependency) -> None:
        """
        Record that ``parent`` depends on ``child``.

        Args:
            parent: Dependent package, or the graph root
            child: Package being depended on
        """
        if child.bom_ref == self.root.bom_ref:
            return
        self._components.setdefault(child.bom_ref, child)
        self._edges.setdefault(child.bom_ref, [])
        children = self._edges.setdefault(parent.bom_ref, [])
        if child.bom_ref not in children:
            children.append(child.bom_ref)

    def add_direct(self, child: Dependency) -> None:
        """Record a dependency declared directly by the root project."""
        self.add_dependency(self.root, child)

    def __contains__(self, dependency: Dependency) -> bool:
        return dependency.bom_ref in self._components

    @property
    def components(self) -> List[Dependency]:
        """All dependencies except the root."""
        return list(self._components.values())

    @property
    def component_count(self) -> int:
        return len(self._components)

    def direct_dependencies(self) -> List[Dependency]:
        """Dependencies the root depends on directly."""
        return [self._components[ref] for ref in self._edges[self.root.bom_ref]]

    def depends_on(self, dependency: Dependency) -> List[Dependency]:
        """Direct children of ``dependency``."""
        return [self._components[ref] for ref in self._edges.get(dependency.bom_ref, [])]

    def edges(self) -> Dict[str, List[str]]:
        """Copy of the adjacency lists keyed by ``bom_ref``, root included."""
        return {ref: list(children) for ref, children in self._edges.items()}

    def remove_ignored(self, names: Iterable[str]) -> None:
        """
        Drop ignored dependencies and anything only reachable through them.

        Args:
            names: Full names (``Dependency.full_name``) to ignore
        """
        ignored = set(names)
        if not ignored:
            return

        removed = {
            ref for ref, dep in self._components.items() if dep.full_name in ignored
        }
        for ref in removed:
            del self._components[ref]
            del self._edges[ref]
        for ref, children in self._edges.items():
            self._edges[ref] = [child for child in children if child not in removed]

        self._prune_unreachable()

    def _prune_unreachable(self) -> None:
        reachable = set()
        queue = deque([self.root.bom_ref])
        while queue:
            ref = queue.popleft()
            if ref in reachable:
                continue
            reachable.add(ref)
            queue.extend(self._edges.get(ref, []))

        for ref in list(self._components):
            if ref not in reachable:
                del self._components[ref]
                del self._edges[ref]
