"""Structural analysis of a knowledge graph.

All degree figures are out-adjacency sizes (distinct reachable neighbours),
not edge counts, so parallel edges between the same pair count once.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from ..models.graph import Graph


def degree_centrality(graph: Graph) -> dict[str, float]:
    """Normalised out-degree centrality: ``degree / (N - 1)``, 0 when N <= 1.

    Scores lie in [0, 1] because an ordered-set adjacency entry holds at most
    N - 1 other nodes (plus, at most, the node itself for a self loop; the
    score is clamped to 1.0 for that case).
    """
    n = graph.node_count
    if n <= 1:
        return {node_id: 0.0 for node_id in graph.nodes}
    return {node_id: min(graph.degree(node_id) / (n - 1), 1.0) for node_id in graph.nodes}


def top_central_nodes(graph: Graph, limit: int = 10) -> list[tuple[str, float]]:
    """Highest-scoring nodes, descending.

    ``sorted`` is stable, so ties keep node insertion order.
    """
    scores = degree_centrality(graph)
    return sorted(scores.items(), key=lambda item: item[1], reverse=True)[:limit]


def connected_components(graph: Graph) -> list[list[str]]:
    """Connected components with edges treated as undirected.

    Iterative stack-based DFS seeded in node insertion order; a new
    component starts at every node not yet visited.
    """
    neighbors = graph.undirected_neighbors()
    visited: set[str] = set()
    components: list[list[str]] = []

    for seed in graph.nodes:
        if seed in visited:
            continue
        component: list[str] = []
        stack = [seed]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            component.append(current)
            stack.extend(nid for nid in neighbors[current] if nid not in visited)
        components.append(component)

    return components


def component_of(graph: Graph, node_id: str) -> list[str]:
    """The component containing *node_id*, or [] if the node is unknown."""
    for component in connected_components(graph):
        if node_id in component:
            return component
    return []


@dataclass
class AnomalyReport:
    average_degree: float
    isolated: list[str] = field(default_factory=list)
    hubs: list[tuple[str, int]] = field(default_factory=list)


def find_anomalies(graph: Graph, hub_limit: int = 10) -> AnomalyReport:
    """Isolated nodes (empty out-adjacency) and hubs (degree > 2x average).

    average degree = 2E / max(N, 1). Hubs are sorted by degree descending
    and capped at *hub_limit*.
    """
    report = AnomalyReport(average_degree=(2 * graph.edge_count) / max(graph.node_count, 1))
    hubs: list[tuple[str, int]] = []

    for node_id in graph.nodes:
        degree = graph.degree(node_id)
        if degree == 0:
            report.isolated.append(node_id)
        elif degree > report.average_degree * 2:
            hubs.append((node_id, degree))

    report.hubs = sorted(hubs, key=lambda item: item[1], reverse=True)[:hub_limit]
    return report


@dataclass
class GraphStatistics:
    node_count: int
    edge_count: int
    node_types: dict[str, int]
    relationship_types: dict[str, int]
    density: float


def graph_density(node_count: int, edge_count: int) -> float:
    """``2E / (N(N - 1))`` for N > 1, else 0.

    This is the undirected density formula applied to a directed multigraph:
    an approximation that can exceed 1 when parallel or reciprocal edges exist.
    """
    if node_count <= 1:
        return 0.0
    return (2 * edge_count) / (node_count * (node_count - 1))


def graph_statistics(graph: Graph) -> GraphStatistics:
    return GraphStatistics(
        node_count=graph.node_count,
        edge_count=graph.edge_count,
        node_types=dict(Counter(node.type for node in graph.nodes.values())),
        relationship_types=dict(Counter(edge.relationship for edge in graph.edges.values())),
        density=graph_density(graph.node_count, graph.edge_count),
    )
