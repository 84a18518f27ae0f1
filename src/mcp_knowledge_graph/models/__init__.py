"""Pydantic models for graphs, tool inputs and service results."""

from .graph import Edge, EntityInput, Graph, Node, new_edge_id, new_graph_id, utc_now_iso

__all__ = [
    "Edge",
    "EntityInput",
    "Graph",
    "Node",
    "new_edge_id",
    "new_graph_id",
    "utc_now_iso",
]
