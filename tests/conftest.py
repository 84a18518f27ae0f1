import os
import sys

import pytest

# Tests always run against the volatile in-memory backend unless a test wires Redis explicitly
os.environ.setdefault("MCP_KG_STORAGE_BACKEND", "memory")

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

from mcp_knowledge_graph.models.graph import Edge, Graph, Node  # noqa: E402
from mcp_knowledge_graph.services.graph_service import KnowledgeGraphService  # noqa: E402
from mcp_knowledge_graph.storage.memory import InMemoryGraphStorage  # noqa: E402


def _build_graph(
    edges: list[tuple[str, str]],
    extra_nodes: tuple[str, ...] = (),
    bidirectional: bool = False,
) -> Graph:
    """Build a Graph directly from (source, target) pairs, nodes in first-seen order."""
    graph = Graph(name="fixture")
    for source, target in edges:
        for node_id in (source, target):
            graph.add_node(Node(id=node_id, label=node_id.upper(), type="concept"))
    for node_id in extra_nodes:
        graph.add_node(Node(id=node_id, label=node_id.upper(), type="concept"))
    for source, target in edges:
        graph.add_edge(Edge(source=source, target=target, relationship="links"), bidirectional=bidirectional)
    return graph


@pytest.fixture
def build_graph():
    """Factory fixture: ``build_graph([("a", "b"), ...], extra_nodes=(...), bidirectional=False)``."""
    return _build_graph


@pytest.fixture
def storage() -> InMemoryGraphStorage:
    return InMemoryGraphStorage()


@pytest.fixture
def service(storage) -> KnowledgeGraphService:
    return KnowledgeGraphService(storage)
