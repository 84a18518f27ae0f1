"""
Graph algorithms for the knowledge graph engine.

Pure functions over ``Graph`` aggregates, no I/O:
- traversal: simple-path enumeration and bounded BFS neighbourhoods
- analysis: centrality, connected components, anomalies, statistics
- export: JSON, GraphML and Cypher renderers
- merge: multi-graph merge with conflict resolution
"""

from .analysis import connected_components, degree_centrality, find_anomalies, graph_statistics
from .export import to_cypher, to_graphml, to_json
from .merge import GraphMerger
from .traversal import bfs_neighbors, find_paths

__all__ = [
    "GraphMerger",
    "bfs_neighbors",
    "connected_components",
    "degree_centrality",
    "find_anomalies",
    "find_paths",
    "graph_statistics",
    "to_cypher",
    "to_graphml",
    "to_json",
]
