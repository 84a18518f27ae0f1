"""Knowledge graph error taxonomy.

Callers map these onto their own transport:

* ``GraphNotFoundError`` / ``InvalidGraphArgumentError`` are caller errors
  (4xx-equivalent).
* ``GraphStorageError`` is a backend failure (5xx-equivalent).
"""


class KnowledgeGraphError(Exception):
    """Base class for all knowledge graph errors."""


class GraphNotFoundError(KnowledgeGraphError):
    """Raised when an operation references a graph id absent from storage."""

    def __init__(self, graph_id: str):
        self.graph_id = graph_id
        super().__init__(f"Graph not found: {graph_id}")


class InvalidGraphArgumentError(KnowledgeGraphError, ValueError):
    """Raised for malformed operation arguments, before any graph work starts."""


class GraphStorageError(KnowledgeGraphError):
    """Raised by storage backends when a get/save/delete/list call fails."""


class GraphInvariantError(KnowledgeGraphError):
    """Raised when a graph aggregate violates its structural invariants."""

    def __init__(self, graph_id: str, problems: list[str]):
        self.graph_id = graph_id
        self.problems = problems
        preview = "; ".join(problems[:5])
        more = f" (+{len(problems) - 5} more)" if len(problems) > 5 else ""
        super().__init__(f"Graph {graph_id} violates invariants: {preview}{more}")
