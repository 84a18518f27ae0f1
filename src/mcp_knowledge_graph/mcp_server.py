#!/usr/bin/env python3
"""FastMCP server for the knowledge graph engine.

Exposes the graph operations as MCP tools with Pydantic-validated inputs.
Each tool handler constructs an input model for validation, calls the
service, and maps engine errors onto ``{"success": False, ...}`` payloads:

    invalid_argument  - validation failures, bad arguments (caller error)
    not_found         - unknown graph id (caller error)
    storage_error     - backend failure or timeout (server error, logged)
    internal_error    - corrupt aggregate or other engine fault (logged)
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastmcp import Context, FastMCP
from pydantic import BaseModel, ValidationError

from .config import settings
from .exceptions import GraphNotFoundError, GraphStorageError, InvalidGraphArgumentError, KnowledgeGraphError
from .models.mcp_inputs import (
    AddRelationshipParams,
    AnalyzeGraphParams,
    CreateGraphParams,
    DeleteGraphParams,
    ExportGraphParams,
    MergeGraphsParams,
    QueryGraphParams,
)
from .services.graph_service import KnowledgeGraphService
from .storage.base import GraphStorage
from .storage.factory import create_storage_instance

logger = logging.getLogger(__name__)


@dataclass
class MCPServerContext:
    """Application context for the MCP server with all required components."""

    storage: GraphStorage
    graph_service: KnowledgeGraphService


@asynccontextmanager
async def mcp_server_lifespan(server: FastMCP) -> AsyncIterator[MCPServerContext]:
    """Build storage and the graph service once; close storage on shutdown."""
    storage = await create_storage_instance()
    graph_service = KnowledgeGraphService(
        storage,
        query_settings=settings.query,
        storage_timeout=settings.storage.timeout_seconds,
    )

    try:
        yield MCPServerContext(storage=storage, graph_service=graph_service)
    finally:
        logger.info("Shutting down MCP Knowledge Graph components...")
        await storage.close()


# Create FastMCP server instance
mcp = FastMCP(
    "MCP Knowledge Graph",
    instructions=(
        "Build knowledge graphs from research data:\n"
        "1. create_graph - start a new graph with optional initial entities\n"
        "2. add_relationship - add an edge, creating nodes that don't exist yet\n"
        "3. query_graph - find paths between nodes, neighbours, or clusters\n"
        "4. analyze_graph - centrality, communities, anomalies or statistics\n"
        "5. export_graph - export as JSON, GraphML or Cypher statements\n"
        "6. merge_graphs - combine several graphs into a new one"
    ),
    lifespan=mcp_server_lifespan,
)


def _service(ctx: Context) -> KnowledgeGraphService:
    return ctx.request_context.lifespan_context.graph_service


def _error(error_type: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": message, "error_type": error_type}


async def _run(call: Callable[[], Awaitable[BaseModel]]) -> dict[str, Any]:
    """Await a service call and translate engine errors into tool payloads."""
    try:
        result = await call()
    except InvalidGraphArgumentError as e:
        return _error("invalid_argument", str(e))
    except GraphNotFoundError as e:
        return _error("not_found", str(e))
    except (GraphStorageError, TimeoutError) as e:
        logger.error(f"Graph storage failure: {e}")
        return _error("storage_error", str(e) or "storage call timed out")
    except KnowledgeGraphError as e:
        logger.error(f"Graph engine failure: {e}")
        return _error("internal_error", str(e))
    return result.model_dump()


# =============================================================================
# GRAPH CONSTRUCTION
# =============================================================================


@mcp.tool()
async def create_graph(
    name: str,
    ctx: Context,
    entities: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Create a new knowledge graph with optional initial entities.

    Args:
        name: Name for the knowledge graph
        entities: Initial entities, each {id, label, type, properties?}

    Returns:
        {graph_id, name, node_count, edge_count, created_at}. Use graph_id for later calls.
    """
    try:
        params = CreateGraphParams(name=name, entities=entities)
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(lambda: _service(ctx).create_graph(params.name, params.entities))


@mcp.tool()
async def add_relationship(
    graph_id: str,
    source: dict[str, Any],
    target: dict[str, Any],
    relationship: str,
    ctx: Context,
    properties: dict[str, Any] | None = None,
    weight: float = 1.0,
    bidirectional: bool = False,
) -> dict[str, Any]:
    """Add a relationship between two entities, creating either entity if it doesn't exist.

    Existing entities are never overwritten.

    Args:
        graph_id: ID of the graph to modify
        source: Source entity {id, label, type, properties?}
        target: Target entity {id, label, type, properties?}
        relationship: Type of relationship (e.g. "works_for", "located_in")
        properties: Additional properties for the edge
        weight: Weight of the relationship
        bidirectional: Whether the relationship can be traversed both ways

    Returns:
        {success, edge_id, graph_id, node_count, edge_count, timestamp}
    """
    try:
        params = AddRelationshipParams(
            graph_id=graph_id,
            source=source,
            target=target,
            relationship=relationship,
            properties=properties,
            weight=weight,
            bidirectional=bidirectional,
        )
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(
        lambda: _service(ctx).add_relationship(
            params.graph_id,
            params.source,
            params.target,
            params.relationship,
            properties=params.properties,
            weight=params.weight,
            bidirectional=params.bidirectional,
        )
    )


# =============================================================================
# QUERY & ANALYSIS
# =============================================================================


@mcp.tool()
async def query_graph(
    graph_id: str,
    start_node: str,
    ctx: Context,
    query_type: str = "neighbors",
    end_node: str | None = None,
    max_depth: int = 3,
) -> dict[str, Any]:
    """Query the graph for paths between nodes, neighbors, or clusters.

    Args:
        graph_id: ID of the graph to query
        start_node: Starting node ID
        query_type: "path", "neighbors" or "cluster"
        end_node: End node ID (required for path queries)
        max_depth: Maximum traversal depth in hops

    Returns:
        Query-specific payload; path results carry `truncated` when the path cap was hit.
    """
    try:
        params = QueryGraphParams(
            graph_id=graph_id,
            query_type=query_type,
            start_node=start_node,
            end_node=end_node,
            max_depth=max_depth,
        )
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(
        lambda: _service(ctx).query_graph(
            params.graph_id,
            params.query_type,
            params.start_node,
            end_node=params.end_node,
            max_depth=params.max_depth,
        )
    )


@mcp.tool()
async def analyze_graph(
    graph_id: str,
    ctx: Context,
    analysis_type: str = "statistics",
) -> dict[str, Any]:
    """Analyze graph structure - centrality, communities, anomalies or statistics.

    Args:
        graph_id: ID of the graph to analyze
        analysis_type: "centrality", "communities", "anomalies" or "statistics"
    """
    try:
        params = AnalyzeGraphParams(graph_id=graph_id, analysis_type=analysis_type)
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(lambda: _service(ctx).analyze_graph(params.graph_id, params.analysis_type))


# =============================================================================
# EXPORT & MERGE
# =============================================================================


@mcp.tool()
async def export_graph(
    graph_id: str,
    ctx: Context,
    format: str = "json",
) -> dict[str, Any]:
    """Export graph data as JSON, GraphML, or Cypher statements.

    Args:
        graph_id: ID of the graph to export
        format: "json", "graphml" or "cypher"

    Returns:
        {format, data, node_count, edge_count, statement_count, timestamp}
    """
    try:
        params = ExportGraphParams(graph_id=graph_id, format=format)
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(lambda: _service(ctx).export_graph(params.graph_id, params.format))


@mcp.tool()
async def merge_graphs(
    graph_ids: list[str],
    ctx: Context,
    new_name: str | None = None,
    conflict_resolution: str = "merge_properties",
) -> dict[str, Any]:
    """Merge multiple graphs into a new graph, handling node conflicts.

    Args:
        graph_ids: IDs of graphs to merge (at least two)
        new_name: Name for the merged graph
        conflict_resolution: "keep_first", "keep_last" or "merge_properties"

    Returns:
        {merged_graph_id, name, node_count, edge_count, conflict_count, conflicts, timestamp}
    """
    try:
        params = MergeGraphsParams(graph_ids=graph_ids, new_name=new_name, conflict_resolution=conflict_resolution)
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(
        lambda: _service(ctx).merge_graphs(
            params.graph_ids,
            new_name=params.new_name,
            conflict_resolution=params.conflict_resolution,
        )
    )


# =============================================================================
# HOUSEKEEPING
# =============================================================================


@mcp.tool()
async def list_graphs(ctx: Context) -> dict[str, Any]:
    """List stored graphs with their node and edge counts."""
    try:
        summaries = await _service(ctx).list_graphs()
    except (GraphStorageError, TimeoutError) as e:
        logger.error(f"Graph storage failure: {e}")
        return _error("storage_error", str(e) or "storage call timed out")
    return {"success": True, "count": len(summaries), "graphs": [s.model_dump() for s in summaries]}


@mcp.tool()
async def delete_graph(graph_id: str, ctx: Context) -> dict[str, Any]:
    """Delete a graph permanently.

    Args:
        graph_id: ID of the graph to delete
    """
    try:
        params = DeleteGraphParams(graph_id=graph_id)
    except ValidationError as e:
        return _error("invalid_argument", str(e))

    return await _run(lambda: _service(ctx).delete_graph(params.graph_id))


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main():
    """Main entry point for the MCP Knowledge Graph server."""
    logging.basicConfig(level=settings.logging.level, format=settings.logging.format)

    logger.info(f"Storage backend: {settings.storage.backend}")

    if settings.server.transport == "stdio":
        mcp.run(transport="stdio")
    else:
        logger.info(f"Starting MCP Knowledge Graph server on {settings.server.host}:{settings.server.port}")
        mcp.run(transport="http", host=settings.server.host, port=settings.server.port, stateless_http=True)


if __name__ == "__main__":
    main()
