"""MCP tool input models.

Pydantic models for the arguments of each knowledge graph MCP tool.
Each tool validates its inputs by constructing the corresponding model;
defaults, range limits and required-field logic live here as declarative
constraints.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, Field, model_validator

from ..config import settings
from .graph import EntityInput
from .validators import AnalysisType, ConflictResolution, ExportFormat, GraphId, Properties, QueryType, Weight


class CreateGraphParams(BaseModel):
    """Validated input for the ``create_graph`` MCP tool."""

    name: str
    entities: list[EntityInput] | None = None


class AddRelationshipParams(BaseModel):
    """Validated input for the ``add_relationship`` MCP tool."""

    graph_id: GraphId
    source: EntityInput
    target: EntityInput
    relationship: str
    properties: Properties = Field(default_factory=dict)
    weight: Weight = 1.0
    bidirectional: bool = False


class QueryGraphParams(BaseModel):
    """Validated input for the ``query_graph`` MCP tool.

    ``max_depth`` is capped by ``settings.query.max_depth_limit`` so a tool
    call cannot request an unbounded path enumeration.
    """

    graph_id: GraphId
    query_type: QueryType = "neighbors"
    start_node: str = Field(min_length=1)
    end_node: str | None = None
    max_depth: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def check_depth_and_end_node(self) -> Self:
        limit = settings.query.max_depth_limit
        if self.max_depth > limit:
            raise ValueError(f"max_depth must be <= {limit}")
        if self.query_type == "path" and not self.end_node:
            raise ValueError("end_node is required for path queries")
        return self


class AnalyzeGraphParams(BaseModel):
    """Validated input for the ``analyze_graph`` MCP tool."""

    graph_id: GraphId
    analysis_type: AnalysisType = "statistics"


class ExportGraphParams(BaseModel):
    """Validated input for the ``export_graph`` MCP tool."""

    graph_id: GraphId
    format: ExportFormat = "json"


class MergeGraphsParams(BaseModel):
    """Validated input for the ``merge_graphs`` MCP tool."""

    graph_ids: list[GraphId] = Field(min_length=2)
    new_name: str | None = None
    conflict_resolution: ConflictResolution = "merge_properties"


class DeleteGraphParams(BaseModel):
    """Validated input for the ``delete_graph`` MCP tool."""

    graph_id: GraphId
