"""
CycloneDX formatter for dependency graphs sent as analysis request bodies.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List

from .. import __version__
from ..models import Dependency, DependencyGraph

logger = logging.getLogger(__name__)

CYCLONEDX_MEDIA_TYPE = "application/vnd.cyclonedx+json"


class CycloneDXFormatter:
    """
    Formatter for CycloneDX JSON documents.

    The output follows CycloneDX 1.4: one ``library`` component per
    dependency and a ``dependencies`` section carrying the graph edges.
    """

    def __init__(self, spec_version: str = "1.4"):
        """Initialize the CycloneDX formatter."""
        self.spec_version = spec_version

    @property
    def format_name(self) -> str:
        """Get the name of this format."""
        return "CycloneDX"

    @property
    def media_type(self) -> str:
        """Content type of the serialized document."""
        return CYCLONEDX_MEDIA_TYPE

    def format_graph(self, graph: DependencyGraph) -> Dict[str, Any]:
        """
        Format a dependency graph as a CycloneDX document.

        Args:
            graph: Dependency graph to format

        Returns:
            CycloneDX document as a dictionary
        """
        document = {
            "bomFormat": "CycloneDX",
            "specVersion": self.spec_version,
            "version": 1,
            "metadata": {
                "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
                "tools": [{"vendor": "manifest-provider", "name": "manifest-provider", "version": __version__}],
                "component": self._format_component(graph.root, "application"),
            },
            "components": [self._format_component(dep) for dep in graph.components],
            "dependencies": self._format_dependencies(graph),
        }

        logger.debug(f"Formatted CycloneDX document with {graph.component_count} components")
        return document

    def to_bytes(self, graph: DependencyGraph) -> bytes:
        """Serialize a dependency graph to UTF-8 encoded CycloneDX JSON."""
        return json.dumps(self.format_graph(graph), ensure_ascii=False).encode("utf-8")

    def _format_component(self, dependency: Dependency, component_type: str = "library") -> Dict[str, Any]:
        component: Dict[str, Any] = {
            "type": component_type,
            "bom-ref": dependency.bom_ref,
            "name": dependency.name,
            "version": dependency.version,
            "purl": dependency.purl,
        }
        if dependency.namespace:
            component["group"] = dependency.namespace
        if dependency.scope:
            component["scope"] = "optional" if dependency.scope in ("provided", "optional") else "required"
        return component

    def _format_dependencies(self, graph: DependencyGraph) -> List[Dict[str, Any]]:
        return [
            {"ref": ref, "dependsOn": children}
            for ref, children in graph.edges().items()
        ]
