"""
Abstract storage interface for knowledge graph aggregates.

A backend is a keyed store of ``Graph`` aggregates addressed by graph id.
Loads are explicit: ``get`` returns a snapshot the caller owns, the caller
mutates it, and ``save`` atomically replaces the stored aggregate. No
backend hands out references to its internal state.
"""

from abc import ABC, abstractmethod

from ..models.graph import Graph


class GraphStorage(ABC):
    """Async contract every graph storage backend implements."""

    async def initialize(self) -> None:
        """Prepare connections or other resources. Default: nothing to do."""

    @abstractmethod
    async def get(self, graph_id: str) -> Graph | None:
        """Return an owned snapshot of the graph, or None if the id is absent.

        Absence is never an error at this layer.
        """

    @abstractmethod
    async def save(self, graph: Graph) -> None:
        """Upsert *graph* keyed by ``graph.id``."""

    @abstractmethod
    async def delete(self, graph_id: str) -> bool:
        """Remove the graph. Returns True if something was deleted."""

    @abstractmethod
    async def list(self) -> list[str]:
        """Return the ids of all stored graphs."""

    async def close(self) -> None:
        """Release backend resources. Default: nothing to do."""
