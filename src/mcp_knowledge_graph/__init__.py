"""
MCP Knowledge Graph - in-process knowledge graph engine for research agents.

Build graphs incrementally from relationship statements, traverse and
analyse them, export them as JSON / GraphML / Cypher, and merge them.
"""

from .exceptions import (
    GraphInvariantError,
    GraphNotFoundError,
    GraphStorageError,
    InvalidGraphArgumentError,
    KnowledgeGraphError,
)
from .services.graph_service import KnowledgeGraphService
from .storage.base import GraphStorage
from .storage.memory import InMemoryGraphStorage

__version__ = "0.1.0"

__all__ = [
    "GraphInvariantError",
    "GraphNotFoundError",
    "GraphStorage",
    "GraphStorageError",
    "InMemoryGraphStorage",
    "InvalidGraphArgumentError",
    "KnowledgeGraphError",
    "KnowledgeGraphService",
]
