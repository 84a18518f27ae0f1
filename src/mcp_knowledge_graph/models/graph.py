"""Knowledge graph data models.

Pydantic v2 models for the Graph aggregate and its Node / Edge records.
``Graph.model_dump(mode="json")`` is the persisted layout every storage
backend must round-trip losslessly.

The adjacency index maps each node id to the ids directly reachable by one
outgoing traversal step. Each entry is an ordered set (a list of distinct
ids in first-insertion order) so traversal output is reproducible across
processes.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import GraphInvariantError
from .validators import NodeId, Properties, Weight

# ---------------------------------------------------------------------------
# Identifier / timestamp helpers
# ---------------------------------------------------------------------------


def _float_to_iso(ts: float) -> str:
    """Convert float timestamp to ISO string (UTC, Z-suffix)."""
    return datetime.fromtimestamp(ts, timezone.utc).isoformat().replace("+00:00", "Z")


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string."""
    return _float_to_iso(datetime.now(timezone.utc).timestamp())


def new_graph_id() -> str:
    return f"graph_{uuid.uuid4()}"


def new_edge_id() -> str:
    return f"edge_{uuid.uuid4()}"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class EntityInput(BaseModel):
    """Caller-supplied node descriptor.

    Used by ``create_graph`` for the initial node set and by
    ``add_relationship`` for auto-creating missing endpoints.
    """

    model_config = ConfigDict(extra="ignore")

    id: NodeId
    label: str
    type: str
    properties: Properties = Field(default_factory=dict)


class Node(BaseModel):
    """An entity in the graph, identified by its caller-supplied id."""

    id: NodeId
    label: str
    type: str
    properties: Properties = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now_iso)

    @classmethod
    def from_entity(cls, entity: EntityInput, created_at: str | None = None) -> "Node":
        return cls(
            id=entity.id,
            label=entity.label,
            type=entity.type,
            properties=dict(entity.properties),
            created_at=created_at or utc_now_iso(),
        )

    def brief(self) -> dict[str, str]:
        """``{id, label, type}`` view used in query and analysis results."""
        return {"id": self.id, "label": self.label, "type": self.type}


class Edge(BaseModel):
    """A directed, weighted, typed relationship between two nodes."""

    id: str = Field(default_factory=new_edge_id)
    source: NodeId
    target: NodeId
    relationship: str
    weight: Weight = 1.0
    properties: Properties = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now_iso)


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


class Graph(BaseModel):
    """Mutable directed, weighted multigraph with an adjacency index.

    Invariants:
        * every node id referenced by an edge or adjacency entry exists in
          ``nodes``
        * ``adjacency`` has an entry (possibly empty) for every node
    """

    id: str = Field(default_factory=new_graph_id)
    name: str
    nodes: dict[str, Node] = Field(default_factory=dict)
    edges: dict[str, Edge] = Field(default_factory=dict)
    adjacency: dict[str, list[str]] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = ""

    def model_post_init(self, __context: Any) -> None:
        if not self.updated_at:
            self.updated_at = self.created_at

    # ── Counts ───────────────────────────────────────────────────────────

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    # ── Mutation primitives ──────────────────────────────────────────────

    def add_node(self, node: Node) -> bool:
        """Insert *node* unless its id is already present.

        Existing nodes are never overwritten. Returns True when inserted.
        """
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        self.adjacency.setdefault(node.id, [])
        return True

    def replace_node(self, node: Node) -> None:
        """Overwrite (or insert) the node stored under ``node.id``."""
        self.nodes[node.id] = node
        self.adjacency.setdefault(node.id, [])

    def connect(self, source: str, target: str) -> bool:
        """Record *target* as reachable from *source*. Returns True if new."""
        if source not in self.nodes or target not in self.nodes:
            raise KeyError(f"cannot connect unknown nodes {source!r} -> {target!r}")
        reachable = self.adjacency.setdefault(source, [])
        if target in reachable:
            return False
        reachable.append(target)
        return True

    def add_edge(self, edge: Edge, bidirectional: bool = False) -> None:
        """Store *edge* and update the adjacency index for it."""
        self.connect(edge.source, edge.target)
        if bidirectional:
            self.connect(edge.target, edge.source)
        self.edges[edge.id] = edge

    def touch(self, now: str | None = None) -> None:
        self.updated_at = now or utc_now_iso()

    # ── Read helpers ─────────────────────────────────────────────────────

    def out_neighbors(self, node_id: str) -> list[str]:
        return self.adjacency.get(node_id, [])

    def degree(self, node_id: str) -> int:
        """Out-adjacency size, the degree every analysis uses."""
        return len(self.adjacency.get(node_id, []))

    def undirected_neighbors(self) -> dict[str, list[str]]:
        """Adjacency with every entry mirrored, for connectivity analysis."""
        view: dict[str, list[str]] = {node_id: [] for node_id in self.nodes}
        seen: dict[str, set[str]] = {node_id: set() for node_id in self.nodes}
        for source, targets in self.adjacency.items():
            for target in targets:
                for a, b in ((source, target), (target, source)):
                    if b not in seen[a]:
                        seen[a].add(b)
                        view[a].append(b)
        return view

    def check_invariants(self) -> None:
        """Raise GraphInvariantError if the aggregate is structurally corrupt."""
        problems: list[str] = []
        for key, node in self.nodes.items():
            if key != node.id:
                problems.append(f"node key {key!r} != node id {node.id!r}")
            if key not in self.adjacency:
                problems.append(f"node {key!r} has no adjacency entry")
        for key, edge in self.edges.items():
            if key != edge.id:
                problems.append(f"edge key {key!r} != edge id {edge.id!r}")
            for endpoint in (edge.source, edge.target):
                if endpoint not in self.nodes:
                    problems.append(f"edge {key!r} references unknown node {endpoint!r}")
        for source, targets in self.adjacency.items():
            if source not in self.nodes:
                problems.append(f"adjacency entry for unknown node {source!r}")
            if len(set(targets)) != len(targets):
                problems.append(f"adjacency entry for {source!r} has duplicates")
            for target in targets:
                if target not in self.nodes:
                    problems.append(f"adjacency {source!r} -> unknown node {target!r}")
        if problems:
            raise GraphInvariantError(self.id, problems)
