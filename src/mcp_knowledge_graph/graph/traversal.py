"""Breadth-first traversals over a graph's adjacency index.

Both functions follow outgoing adjacency only; a bidirectional relationship
is traversable backwards because its reverse entry is in the index.
"""

from collections import deque
from dataclasses import dataclass, field

from ..models.graph import Graph


@dataclass
class PathSearch:
    """Outcome of a simple-path enumeration."""

    paths: list[list[str]] = field(default_factory=list)
    truncated: bool = False


def find_paths(
    graph: Graph,
    start: str,
    end: str,
    max_depth: int,
    max_results: int | None = None,
) -> PathSearch:
    """Enumerate every simple path from *start* to *end* with at most *max_depth* hops.

    Each queue entry carries its full node sequence; a node already on the
    sequence is never appended again, so no returned path repeats a node.
    The number of paths can grow exponentially with depth on dense graphs,
    so enumeration stops once *max_results* paths are found and the
    outcome is marked truncated.

    Paths come out in BFS order: shorter paths first.
    """
    search = PathSearch()
    if start not in graph.nodes or end not in graph.nodes:
        return search

    max_len = max_depth + 1
    queue: deque[list[str]] = deque([[start]])

    while queue:
        path = queue.popleft()
        current = path[-1]

        if current == end:
            if max_results is not None and len(search.paths) >= max_results:
                search.truncated = True
                break
            search.paths.append(path)
            continue

        if len(path) >= max_len:
            continue

        on_path = set(path)
        for neighbor in graph.out_neighbors(current):
            if neighbor not in on_path:
                queue.append([*path, neighbor])

    return search


def bfs_neighbors(graph: Graph, start: str, max_depth: int) -> list[str]:
    """Distinct node ids reachable from *start* within *max_depth* hops.

    Standard BFS with a visited set: each node is reported once, at the
    depth it is first reached. *start* itself is excluded.
    """
    if start not in graph.nodes:
        return []

    visited = {start}
    reached: list[str] = []
    queue: deque[tuple[str, int]] = deque([(start, 0)])

    while queue:
        node_id, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for neighbor in graph.out_neighbors(node_id):
            if neighbor in visited:
                continue
            visited.add(neighbor)
            reached.append(neighbor)
            queue.append((neighbor, depth + 1))

    return reached
