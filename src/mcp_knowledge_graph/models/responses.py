"""Service-layer response models.

Every ``KnowledgeGraphService`` operation returns one of these. They are
plain data: ``model_dump()`` yields the JSON-serialisable payload the tool
layer sends back to the caller.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from .graph import utc_now_iso

# ---------------------------------------------------------------------------
# Shared shapes
# ---------------------------------------------------------------------------


class NodeRef(BaseModel):
    """``{id, label, type}`` view of a node."""

    id: str
    label: str
    type: str


class NeighborNode(NodeRef):
    properties: dict[str, Any] = Field(default_factory=dict)


class TimestampedResult(BaseModel):
    timestamp: str = Field(default_factory=utc_now_iso)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class CreateGraphResult(BaseModel):
    """Result of ``create_graph()``."""

    graph_id: str
    name: str
    node_count: int
    edge_count: int = 0
    created_at: str


class AddRelationshipResult(TimestampedResult):
    """Result of ``add_relationship()``."""

    success: bool = True
    edge_id: str
    graph_id: str
    node_count: int
    edge_count: int


class MergeConflict(BaseModel):
    node_id: str
    graph_id: str
    resolution: Literal["kept_first", "kept_last", "merged_properties"]


class MergeResult(TimestampedResult):
    """Result of ``merge_graphs()``. ``conflicts`` is a preview, ``conflict_count`` the total."""

    merged_graph_id: str
    name: str
    node_count: int
    edge_count: int
    conflict_count: int
    conflicts: list[MergeConflict] = Field(default_factory=list)


class DeleteGraphResult(BaseModel):
    success: bool = True
    graph_id: str


class GraphSummary(BaseModel):
    graph_id: str
    name: str
    node_count: int
    edge_count: int
    updated_at: str


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class PathQueryResult(TimestampedResult):
    query_type: Literal["path"] = "path"
    start_node: str
    end_node: str
    path_count: int
    paths: list[list[NodeRef]] = Field(default_factory=list)
    truncated: bool = False


class NeighborsQueryResult(TimestampedResult):
    query_type: Literal["neighbors"] = "neighbors"
    start_node: str
    depth: int
    neighbor_count: int
    neighbors: list[NeighborNode] = Field(default_factory=list)


class ClusterQueryResult(TimestampedResult):
    query_type: Literal["cluster"] = "cluster"
    start_node: str
    cluster_size: int
    cluster_nodes: list[NodeRef] = Field(default_factory=list)


QueryResult = PathQueryResult | NeighborsQueryResult | ClusterQueryResult


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


class CentralityNode(NodeRef):
    centrality_score: float


class CentralityAnalysis(TimestampedResult):
    analysis_type: Literal["centrality"] = "centrality"
    top_nodes: list[CentralityNode] = Field(default_factory=list)
    total_nodes: int


class Community(BaseModel):
    id: int
    size: int
    members: list[NodeRef] = Field(default_factory=list)


class CommunitiesAnalysis(TimestampedResult):
    analysis_type: Literal["communities"] = "communities"
    community_count: int
    communities: list[Community] = Field(default_factory=list)


class HubNode(NodeRef):
    degree: int


class AnomaliesAnalysis(TimestampedResult):
    analysis_type: Literal["anomalies"] = "anomalies"
    isolated_nodes: list[NodeRef] = Field(default_factory=list)
    hub_nodes: list[HubNode] = Field(default_factory=list)
    average_degree: float


class StatisticsAnalysis(TimestampedResult):
    analysis_type: Literal["statistics"] = "statistics"
    node_count: int
    edge_count: int
    node_types: dict[str, int] = Field(default_factory=dict)
    relationship_types: dict[str, int] = Field(default_factory=dict)
    density: float
    created_at: str
    updated_at: str


AnalysisResult = CentralityAnalysis | CommunitiesAnalysis | AnomaliesAnalysis | StatisticsAnalysis


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class ExportResult(TimestampedResult):
    """Result of ``export_graph()``. ``statement_count`` is only set for cypher."""

    format: Literal["json", "graphml", "cypher"]
    data: str
    node_count: int
    edge_count: int
    statement_count: int | None = None
