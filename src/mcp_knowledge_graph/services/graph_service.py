"""
Knowledge Graph Service - graph mutation, query, analysis, export and merge.

The service is stateless: every operation loads the aggregate it needs from
storage, works on that owned snapshot, and saves it back when it mutated
it. Nothing is cached across calls, so each call observes the latest
persisted state.

Mutations of one graph id are serialised inside the process by a per-id
asyncio.Lock held for the whole load-mutate-save cycle. Cross-process
writers sharing a durable backend are not coordinated.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Mapping
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from ..config import QuerySettings
from ..exceptions import GraphNotFoundError, InvalidGraphArgumentError
from ..graph.analysis import component_of, connected_components, find_anomalies, graph_statistics, top_central_nodes
from ..graph.export import to_cypher_statements, to_graphml, to_json
from ..graph.merge import GraphMerger
from ..graph.traversal import bfs_neighbors, find_paths
from ..models.graph import Edge, EntityInput, Graph, Node, new_edge_id, new_graph_id, utc_now_iso
from ..models.responses import (
    AddRelationshipResult,
    AnalysisResult,
    AnomaliesAnalysis,
    CentralityAnalysis,
    CentralityNode,
    ClusterQueryResult,
    CommunitiesAnalysis,
    Community,
    CreateGraphResult,
    DeleteGraphResult,
    ExportResult,
    GraphSummary,
    HubNode,
    MergeResult,
    NeighborNode,
    NeighborsQueryResult,
    NodeRef,
    PathQueryResult,
    QueryResult,
    StatisticsAnalysis,
)
from ..models.validators import ANALYSIS_TYPES, CONFLICT_RESOLUTIONS, EXPORT_FORMATS, QUERY_TYPES
from ..storage.base import GraphStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

EntityLike = EntityInput | Mapping[str, Any]


def _coerce_entity(entity: EntityLike, role: str) -> EntityInput:
    if isinstance(entity, EntityInput):
        return entity
    try:
        return EntityInput.model_validate(entity)
    except ValueError as e:
        raise InvalidGraphArgumentError(f"Invalid {role} entity: {e}") from e


class KnowledgeGraphService:
    """
    Graph engine operations over a pluggable GraphStorage.

    Construct one instance per storage at application wiring time and pass
    it to whatever invokes the operations.
    """

    def __init__(
        self,
        storage: GraphStorage,
        query_settings: QuerySettings | None = None,
        storage_timeout: float | None = None,
    ):
        self.storage = storage
        self.query_settings = query_settings or QuerySettings()
        self.storage_timeout = storage_timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    # ── Storage access ───────────────────────────────────────────────────

    async def _call_storage(self, call: Awaitable[T]) -> T:
        """Await a storage call, bounded by ``storage_timeout`` when set."""
        if self.storage_timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.storage_timeout)

    async def _load(self, graph_id: str) -> Graph:
        graph = await self._call_storage(self.storage.get(graph_id))
        if graph is None:
            raise GraphNotFoundError(graph_id)
        return graph

    async def _save(self, graph: Graph) -> None:
        await self._call_storage(self.storage.save(graph))

    @asynccontextmanager
    async def _graph_lock(self, graph_id: str) -> AsyncIterator[None]:
        """Hold the per-graph write lock.

        A lock lives only while some task holds or awaits it, so calls with
        unknown or deleted ids leave nothing behind.
        """
        lock = self._locks.setdefault(graph_id, asyncio.Lock())
        self._lock_users[graph_id] = self._lock_users.get(graph_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[graph_id] -= 1
            if not self._lock_users[graph_id]:
                del self._lock_users[graph_id]
                del self._locks[graph_id]

    @staticmethod
    def _refs(graph: Graph, node_ids: list[str]) -> list[NodeRef]:
        return [NodeRef(**graph.nodes[node_id].brief()) for node_id in node_ids]

    # ── Construction ─────────────────────────────────────────────────────

    async def create_graph(self, name: str, entities: list[EntityLike] | None = None) -> CreateGraphResult:
        """Create a graph, optionally seeded with nodes (no edges)."""
        logger.info(f"Creating knowledge graph: {name}")

        now = utc_now_iso()
        graph = Graph(id=new_graph_id(), name=name, created_at=now, updated_at=now)

        for entity in entities or []:
            entity = _coerce_entity(entity, "initial")
            if not graph.add_node(Node.from_entity(entity, now)):
                logger.debug(f"Duplicate initial entity {entity.id!r} ignored")

        await self._save(graph)

        logger.info(f"Created graph {graph.id} with {graph.node_count} nodes")
        return CreateGraphResult(
            graph_id=graph.id,
            name=name,
            node_count=graph.node_count,
            edge_count=0,
            created_at=now,
        )

    async def add_relationship(
        self,
        graph_id: str,
        source: EntityLike,
        target: EntityLike,
        relationship: str,
        properties: dict[str, Any] | None = None,
        weight: float = 1.0,
        bidirectional: bool = False,
    ) -> AddRelationshipResult:
        """
        Add a directed edge, creating either endpoint node if it is absent.

        Existing nodes are left untouched even when the descriptors differ.
        With ``bidirectional`` the adjacency index records both directions;
        a single Edge record is stored either way.
        """
        source = _coerce_entity(source, "source")
        target = _coerce_entity(target, "target")

        async with self._graph_lock(graph_id):
            graph = await self._load(graph_id)

            logger.info(f"Adding relationship: {source.id} -[{relationship}]-> {target.id} in {graph_id}")

            now = utc_now_iso()
            graph.add_node(Node.from_entity(source, now))
            graph.add_node(Node.from_entity(target, now))

            try:
                edge = Edge(
                    id=new_edge_id(),
                    source=source.id,
                    target=target.id,
                    relationship=relationship,
                    weight=weight,
                    properties=properties,
                    created_at=now,
                )
            except ValueError as e:
                raise InvalidGraphArgumentError(f"Invalid relationship: {e}") from e
            graph.add_edge(edge, bidirectional=bidirectional)
            graph.touch(now)

            await self._save(graph)

        return AddRelationshipResult(
            edge_id=edge.id,
            graph_id=graph_id,
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            timestamp=now,
        )

    # ── Queries ──────────────────────────────────────────────────────────

    async def query_graph(
        self,
        graph_id: str,
        query_type: str,
        start_node: str,
        end_node: str | None = None,
        max_depth: int = 3,
    ) -> QueryResult:
        """
        Traverse the graph from ``start_node``.

        Query types:
            path:      all simple paths to ``end_node`` with <= max_depth hops
            neighbors: distinct nodes within max_depth hops (BFS order)
            cluster:   the connected component containing start_node

        An unknown start node yields an empty result, not an error.
        """
        if query_type not in QUERY_TYPES:
            raise InvalidGraphArgumentError(f"Unknown query type: {query_type}")
        if max_depth < 0:
            raise InvalidGraphArgumentError("max_depth must be >= 0")
        if query_type == "path" and not end_node:
            raise InvalidGraphArgumentError("endNode is required for path queries")

        graph = await self._load(graph_id)
        logger.info(f"Querying graph {graph_id}: {query_type} from {start_node}")

        if query_type == "path":
            search = find_paths(
                graph,
                start_node,
                end_node,
                max_depth,
                max_results=self.query_settings.max_path_results,
            )
            if search.truncated:
                logger.warning(
                    f"Path enumeration {start_node} -> {end_node} in {graph_id} truncated "
                    f"at {self.query_settings.max_path_results} paths (max_depth={max_depth})"
                )
            return PathQueryResult(
                start_node=start_node,
                end_node=end_node,
                path_count=len(search.paths),
                paths=[self._refs(graph, path) for path in search.paths],
                truncated=search.truncated,
            )

        if query_type == "neighbors":
            reached = bfs_neighbors(graph, start_node, max_depth)
            return NeighborsQueryResult(
                start_node=start_node,
                depth=max_depth,
                neighbor_count=len(reached),
                neighbors=[
                    NeighborNode(**graph.nodes[node_id].brief(), properties=graph.nodes[node_id].properties)
                    for node_id in reached
                ],
            )

        cluster = component_of(graph, start_node)
        return ClusterQueryResult(
            start_node=start_node,
            cluster_size=len(cluster),
            cluster_nodes=self._refs(graph, cluster),
        )

    # ── Analysis ─────────────────────────────────────────────────────────

    async def analyze_graph(self, graph_id: str, analysis_type: str) -> AnalysisResult:
        """Compute centrality, communities, anomalies or summary statistics."""
        if analysis_type not in ANALYSIS_TYPES:
            raise InvalidGraphArgumentError(f"Unknown analysis type: {analysis_type}")

        graph = await self._load(graph_id)
        logger.info(f"Analyzing graph {graph_id}: {analysis_type}")
        top_n = self.query_settings.top_n

        if analysis_type == "centrality":
            return CentralityAnalysis(
                top_nodes=[
                    CentralityNode(**graph.nodes[node_id].brief(), centrality_score=score)
                    for node_id, score in top_central_nodes(graph, limit=top_n)
                ],
                total_nodes=graph.node_count,
            )

        if analysis_type == "communities":
            components = connected_components(graph)
            preview = self.query_settings.member_preview
            return CommunitiesAnalysis(
                community_count=len(components),
                communities=[
                    Community(id=index, size=len(members), members=self._refs(graph, members[:preview]))
                    for index, members in enumerate(components)
                ],
            )

        if analysis_type == "anomalies":
            report = find_anomalies(graph, hub_limit=top_n)
            return AnomaliesAnalysis(
                isolated_nodes=self._refs(graph, report.isolated),
                hub_nodes=[HubNode(**graph.nodes[node_id].brief(), degree=degree) for node_id, degree in report.hubs],
                average_degree=report.average_degree,
            )

        stats = graph_statistics(graph)
        return StatisticsAnalysis(
            node_count=stats.node_count,
            edge_count=stats.edge_count,
            node_types=stats.node_types,
            relationship_types=stats.relationship_types,
            density=stats.density,
            created_at=graph.created_at,
            updated_at=graph.updated_at,
        )

    # ── Export ───────────────────────────────────────────────────────────

    async def export_graph(self, graph_id: str, format: str = "json") -> ExportResult:
        """Render the graph as JSON, GraphML or Cypher text."""
        if format not in EXPORT_FORMATS:
            raise InvalidGraphArgumentError(f"Unknown export format: {format}")

        graph = await self._load(graph_id)
        logger.info(f"Exporting graph {graph_id} as {format}")

        if format == "json":
            return ExportResult(
                format="json", data=to_json(graph), node_count=graph.node_count, edge_count=graph.edge_count
            )

        if format == "graphml":
            return ExportResult(
                format="graphml", data=to_graphml(graph), node_count=graph.node_count, edge_count=graph.edge_count
            )

        statements = to_cypher_statements(graph)
        return ExportResult(
            format="cypher",
            data=";\n".join(statements),
            node_count=graph.node_count,
            edge_count=graph.edge_count,
            statement_count=len(statements),
        )

    # ── Merge ────────────────────────────────────────────────────────────

    async def merge_graphs(
        self,
        graph_ids: list[str],
        new_name: str | None = None,
        conflict_resolution: str = "merge_properties",
    ) -> MergeResult:
        """
        Merge two or more graphs into a new graph; inputs are not modified.

        Every input id is resolved before any merging starts, so a missing
        graph fails the call without wasted work.
        """
        if len(graph_ids) < 2:
            raise InvalidGraphArgumentError("At least two graph ids are required to merge")
        if conflict_resolution not in CONFLICT_RESOLUTIONS:
            raise InvalidGraphArgumentError(f"Unknown conflict resolution: {conflict_resolution}")

        logger.info(f"Merging {len(graph_ids)} graphs ({conflict_resolution})")

        inputs = [await self._load(graph_id) for graph_id in graph_ids]

        now = utc_now_iso()
        merged_id = new_graph_id()
        merged = Graph(id=merged_id, name=new_name or f"Merged_{merged_id}", created_at=now, updated_at=now)
        merger = GraphMerger(merged, conflict_resolution)
        for graph in inputs:
            merger.add(graph)

        await self._save(merged)

        logger.info(
            f"Merged graph {merged_id}: {merged.node_count} nodes, {merged.edge_count} edges, "
            f"{len(merger.conflicts)} conflicts"
        )
        return MergeResult(
            merged_graph_id=merged_id,
            name=merged.name,
            node_count=merged.node_count,
            edge_count=merged.edge_count,
            conflict_count=len(merger.conflicts),
            conflicts=merger.conflicts[: self.query_settings.conflict_preview],
            timestamp=now,
        )

    # ── Housekeeping ─────────────────────────────────────────────────────

    async def list_graphs(self) -> list[GraphSummary]:
        summaries = []
        for graph_id in await self._call_storage(self.storage.list()):
            graph = await self._call_storage(self.storage.get(graph_id))
            if graph is None:
                # Deleted between list() and get()
                continue
            summaries.append(
                GraphSummary(
                    graph_id=graph.id,
                    name=graph.name,
                    node_count=graph.node_count,
                    edge_count=graph.edge_count,
                    updated_at=graph.updated_at,
                )
            )
        return summaries

    async def delete_graph(self, graph_id: str) -> DeleteGraphResult:
        async with self._graph_lock(graph_id):
            deleted = await self._call_storage(self.storage.delete(graph_id))
            if not deleted:
                raise GraphNotFoundError(graph_id)
        logger.info(f"Deleted graph {graph_id}")
        return DeleteGraphResult(graph_id=graph_id)
