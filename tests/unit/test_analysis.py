"""Unit tests for centrality, components, anomalies and statistics."""

import pytest

from mcp_knowledge_graph.graph.analysis import (
    component_of,
    connected_components,
    degree_centrality,
    find_anomalies,
    graph_density,
    graph_statistics,
    top_central_nodes,
)
from mcp_knowledge_graph.models.graph import Edge, Graph, Node


class TestCentrality:
    def test_normalised_out_degree(self, build_graph):
        graph = build_graph([("a", "b"), ("a", "c"), ("b", "c")])
        assert degree_centrality(graph) == {"a": 1.0, "b": 0.5, "c": 0.0}

    def test_scores_within_unit_interval(self, build_graph):
        pairs = [(x, y) for x in "abcdef" for y in "abcdef" if x != y]
        graph = build_graph(pairs + [("a", "a")])
        assert all(0.0 <= s <= 1.0 for s in degree_centrality(graph).values())

    @pytest.mark.parametrize("node_ids", [(), ("solo",)])
    def test_tiny_graphs_score_zero(self, node_ids):
        graph = Graph(name="tiny")
        for node_id in node_ids:
            graph.add_node(Node(id=node_id, label=node_id, type="t"))
        if node_ids:
            graph.add_edge(Edge(source="solo", target="solo", relationship="self"))
        assert all(s == 0.0 for s in degree_centrality(graph).values())

    def test_top_nodes_descending_ties_in_insertion_order(self, build_graph):
        graph = build_graph([("b", "a"), ("c", "a"), ("d", "a"), ("d", "b")])
        ranked = top_central_nodes(graph, limit=3)
        assert [node_id for node_id, _ in ranked] == ["d", "b", "c"]

    def test_top_nodes_limit(self, build_graph):
        graph = build_graph([(f"n{i}", f"n{i + 1}") for i in range(20)])
        assert len(top_central_nodes(graph, limit=10)) == 10


class TestComponents:
    def test_directed_chain_is_one_component_regardless_of_order(self):
        graph = Graph(name="g")
        # Tail first so outgoing-only DFS would split the chain
        for node_id in ("c", "b", "a"):
            graph.add_node(Node(id=node_id, label=node_id, type="t"))
        graph.add_edge(Edge(source="a", target="b", relationship="r"))
        graph.add_edge(Edge(source="b", target="c", relationship="r"))

        components = connected_components(graph)
        assert len(components) == 1
        assert sorted(components[0]) == ["a", "b", "c"]
        assert components[0][0] == "c"

    def test_disjoint_components_in_seed_order(self, build_graph):
        graph = build_graph([("a", "b"), ("c", "d")], extra_nodes=("e",))
        components = connected_components(graph)
        assert [sorted(c) for c in components] == [["a", "b"], ["c", "d"], ["e"]]

    def test_every_node_in_exactly_one_component(self, build_graph):
        graph = build_graph([("a", "b"), ("b", "c"), ("d", "e"), ("f", "d")], extra_nodes=("g", "h"))
        members = [node_id for component in connected_components(graph) for node_id in component]
        assert sorted(members) == sorted(graph.nodes)

    def test_component_of(self, build_graph):
        graph = build_graph([("a", "b"), ("c", "d")])
        assert sorted(component_of(graph, "d")) == ["c", "d"]
        assert component_of(graph, "missing") == []


class TestAnomalies:
    def test_chain_tail_is_isolated(self, build_graph):
        graph = build_graph([("a", "b"), ("b", "c"), ("c", "d"), ("d", "e")])
        report = find_anomalies(graph)

        assert report.isolated == ["e"]
        assert report.average_degree == pytest.approx(1.6)
        assert report.hubs == []

    def test_star_centre_is_hub(self, build_graph):
        graph = build_graph([("hub", f"leaf{i}") for i in range(6)])
        report = find_anomalies(graph)

        # 6 edges, 7 nodes: average 12/7 ≈ 1.71; hub degree 6 > 3.43
        assert report.hubs == [("hub", 6)]
        assert len(report.isolated) == 6

    def test_hubs_sorted_and_capped(self, build_graph):
        edges = [(f"h{h}", f"leaf{h}_{i}") for h in range(4) for i in range(h + 5)]
        graph = build_graph(edges)
        report = find_anomalies(graph, hub_limit=2)

        assert [degree for _, degree in report.hubs] == [8, 7]

    def test_empty_graph(self):
        report = find_anomalies(Graph(name="empty"))
        assert report.average_degree == 0.0
        assert report.isolated == []


class TestStatistics:
    @pytest.mark.parametrize("n,e", [(2, 1), (5, 4), (10, 3)])
    def test_density_formula(self, n, e):
        assert graph_density(n, e) == (2 * e) / (n * (n - 1))

    @pytest.mark.parametrize("n", [0, 1])
    def test_density_zero_for_tiny_graphs(self, n):
        assert graph_density(n, 3) == 0.0

    def test_histograms(self):
        graph = Graph(name="g")
        graph.add_node(Node(id="a", label="Alice", type="person"))
        graph.add_node(Node(id="b", label="Bob", type="person"))
        graph.add_node(Node(id="acme", label="ACME", type="company"))
        graph.add_edge(Edge(source="a", target="acme", relationship="works_for"))
        graph.add_edge(Edge(source="b", target="acme", relationship="works_for"))
        graph.add_edge(Edge(source="a", target="b", relationship="knows"))

        stats = graph_statistics(graph)

        assert stats.node_types == {"person": 2, "company": 1}
        assert stats.relationship_types == {"works_for": 2, "knows": 1}
        assert stats.density == 1.0
