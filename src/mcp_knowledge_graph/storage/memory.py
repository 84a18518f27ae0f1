"""
In-memory graph storage.

Process-local dict keyed by graph id. Nothing is serialised, so graphs do
not survive a restart: suitable for an ephemeral research session, not as
the only production store.
"""

import logging

from ..models.graph import Graph
from .base import GraphStorage

logger = logging.getLogger(__name__)


class InMemoryGraphStorage(GraphStorage):
    """Volatile dict-backed storage with copy-on-load / copy-on-save."""

    def __init__(self):
        self._graphs: dict[str, Graph] = {}

    async def get(self, graph_id: str) -> Graph | None:
        graph = self._graphs.get(graph_id)
        if graph is None:
            return None
        return graph.model_copy(deep=True)

    async def save(self, graph: Graph) -> None:
        self._graphs[graph.id] = graph.model_copy(deep=True)
        logger.debug(f"Saved graph {graph.id} ({graph.node_count} nodes, {graph.edge_count} edges)")

    async def delete(self, graph_id: str) -> bool:
        return self._graphs.pop(graph_id, None) is not None

    async def list(self) -> list[str]:
        return list(self._graphs)

    def __len__(self) -> int:
        return len(self._graphs)
