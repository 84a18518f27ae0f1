"""Service layer: business logic shared by every transport."""

from .graph_service import KnowledgeGraphService

__all__ = ["KnowledgeGraphService"]
