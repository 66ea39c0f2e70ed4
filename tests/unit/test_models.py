import pytest

from manifest_provider.error_handling import UnsupportedManifestError
from manifest_provider.models import (
    Dependency, DependencyGraph, Ecosystem, normalize_python_name
)

# --- Ecosystem ---

@pytest.mark.parametrize("manifest, expected", [
    ("pom.xml", Ecosystem.MAVEN),
    ("/work/app/package.json", Ecosystem.NPM),
    ("service/go.mod", Ecosystem.GOLANG),
    ("requirements.txt", Ecosystem.PYTHON),
])
def test_ecosystem_from_manifest(manifest, expected):
    assert Ecosystem.from_manifest(manifest) is expected


def test_ecosystem_from_unknown_manifest():
    with pytest.raises(UnsupportedManifestError) as exc_info:
        Ecosystem.from_manifest("build.gradle")
    assert exc_info.value.manifest_path == "build.gradle"
    assert exc_info.value.error_code == "UNSUPPORTED_MANIFEST"


def test_ecosystem_values():
    assert Ecosystem.MAVEN.value == "maven"
    assert Ecosystem.NPM.value == "npm"
    assert Ecosystem.GOLANG.value == "golang"
    assert Ecosystem.PYTHON.value == "pip"
    assert Ecosystem.PYTHON.purl_type == "pypi"


# --- Dependency ---

def test_normalize_python_name():
    assert normalize_python_name("Flask_SQLAlchemy") == "flask-sqlalchemy"
    assert normalize_python_name("zope.interface") == "zope-interface"
    assert normalize_python_name("some__weird--name") == "some-weird-name"


def test_maven_dependency_purl():
    dep = Dependency.maven("org.apache.commons", "commons-lang3", "3.12.0", "compile")
    assert dep.full_name == "org.apache.commons:commons-lang3"
    assert dep.purl == "pkg:maven/org.apache.commons/commons-lang3@3.12.0"
    assert dep.bom_ref == dep.purl
    assert dep.scope == "compile"


def test_scoped_npm_dependency():
    dep = Dependency.npm("@angular/core", "16.2.0")
    assert dep.namespace == "@angular"
    assert dep.name == "core"
    assert dep.full_name == "@angular/core"
    assert dep.purl == "pkg:npm/%40angular/core@16.2.0"


def test_golang_dependency_splits_module_path():
    dep = Dependency.golang("github.com/sirupsen/logrus", "v1.9.3")
    assert dep.namespace == "github.com/sirupsen"
    assert dep.name == "logrus"
    assert dep.purl == "pkg:golang/github.com/sirupsen/logrus@v1.9.3"


def test_python_dependency_is_normalized():
    dep = Dependency.python("Jinja2", "3.1.2")
    assert dep.name == "jinja2"
    assert dep.purl == "pkg:pypi/jinja2@3.1.2"


def test_dependency_without_version_has_bare_purl():
    assert Dependency.golang("example.com/mod", "").purl == "pkg:golang/example.com/mod"


def test_dependency_requires_name():
    with pytest.raises(ValueError):
        Dependency(name="", version="1.0", ecosystem=Ecosystem.NPM)


def test_dependency_accepts_ecosystem_value():
    dep = Dependency(name="left-pad", version="1.3.0", ecosystem="npm")
    assert dep.ecosystem is Ecosystem.NPM
    assert dep.to_dict()["purl"] == "pkg:npm/left-pad@1.3.0"


# --- DependencyGraph ---

@pytest.fixture
def graph():
    root = Dependency.npm("app", "1.0.0")
    graph = DependencyGraph(root)
    a = Dependency.npm("a", "1.0.0")
    b = Dependency.npm("b", "1.0.0")
    c = Dependency.npm("c", "1.0.0")
    graph.add_direct(a)
    graph.add_direct(b)
    graph.add_dependency(b, c)
    return graph


def test_graph_direct_and_transitive(graph):
    names = [dep.name for dep in graph.components]
    assert names == ["a", "b", "c"]
    assert [dep.name for dep in graph.direct_dependencies()] == ["a", "b"]
    b = Dependency.npm("b", "1.0.0")
    assert [dep.name for dep in graph.depends_on(b)] == ["c"]


def test_graph_deduplicates_components_and_edges(graph):
    b = Dependency.npm("b", "1.0.0")
    c = Dependency.npm("c", "1.0.0")
    graph.add_dependency(b, c)
    graph.add_direct(c)
    assert graph.component_count == 3
    assert graph.edges()[b.bom_ref] == [c.bom_ref]


def test_graph_ignores_root_as_child(graph):
    graph.add_dependency(Dependency.npm("a", "1.0.0"), graph.root)
    assert graph.root not in graph
    assert graph.component_count == 3


def test_graph_edges_are_a_copy(graph):
    edges = graph.edges()
    edges[graph.root.bom_ref].clear()
    assert len(graph.direct_dependencies()) == 2


def test_remove_ignored_prunes_unreachable(graph):
    graph.remove_ignored(["b"])
    assert [dep.name for dep in graph.components] == ["a"]
    assert Dependency.npm("c", "1.0.0") not in graph
    assert graph.edges()[graph.root.bom_ref] == [Dependency.npm("a", "1.0.0").bom_ref]


def test_remove_ignored_keeps_shared_dependencies(graph):
    a = Dependency.npm("a", "1.0.0")
    c = Dependency.npm("c", "1.0.0")
    graph.add_dependency(a, c)
    graph.remove_ignored(["b"])
    assert c in graph
