"""
Redis-backed graph storage.

Durable backend for the knowledge graph engine:
- One JSON document per graph under ``<prefix>graph:<id>``
- A Redis set ``<prefix>index`` tracking every stored graph id
- Document and index updated together in a MULTI/EXEC pipeline

Unlike a cache, storage failures are not swallowed: every Redis error or
corrupt document surfaces as GraphStorageError.
"""

import logging

from pydantic import ValidationError
from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from ..exceptions import GraphInvariantError, GraphStorageError
from ..models.graph import Graph
from .base import GraphStorage

logger = logging.getLogger(__name__)


class RedisGraphStorage(GraphStorage):
    """
    Graph storage on a Redis instance.

    Graph documents are ``Graph.model_dump_json()`` output, which preserves
    the persisted layout (ids, name, node map, edge map, adjacency map,
    created_at, updated_at) including adjacency ordering.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379",
        password: str | None = None,
        key_prefix: str = "mcp:kg:",
        max_connections: int = 16,
    ):
        """
        Args:
            url: Redis connection URL
            password: Optional password, overrides credentials in the URL
            key_prefix: Prefix for all keys written by this backend
            max_connections: Maximum Redis connections in pool
        """
        self.url = url
        self.password = password
        self.key_prefix = key_prefix
        self.max_connections = max_connections

        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize Redis connection pool and verify connectivity."""
        if self._initialized:
            return

        pool_kwargs = {"max_connections": self.max_connections, "decode_responses": True}
        if self.password:
            pool_kwargs["password"] = self.password
        self._pool = ConnectionPool.from_url(self.url, **pool_kwargs)
        self._redis = Redis(connection_pool=self._pool)

        try:
            await self._redis.ping()
        except RedisError as e:
            logger.error(f"RedisGraphStorage initialization failed: {e}")
            await self.close()
            raise GraphStorageError(f"Cannot connect to Redis at {self.url}: {e}") from e

        self._initialized = True
        logger.info(f"RedisGraphStorage initialized: {self.url} (prefix={self.key_prefix!r})")

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

        if self._pool:
            await self._pool.aclose()
            self._pool = None

        self._initialized = False

    # ── Key helpers ──────────────────────────────────────────────────────

    def _graph_key(self, graph_id: str) -> str:
        return f"{self.key_prefix}graph:{graph_id}"

    @property
    def _index_key(self) -> str:
        return f"{self.key_prefix}index"

    def _client(self) -> Redis:
        if not self._initialized or self._redis is None:
            raise GraphStorageError("RedisGraphStorage not initialized. Call initialize() first.")
        return self._redis

    # ── GraphStorage contract ────────────────────────────────────────────

    async def get(self, graph_id: str) -> Graph | None:
        redis = self._client()
        try:
            raw = await redis.get(self._graph_key(graph_id))
        except RedisError as e:
            raise GraphStorageError(f"Failed to load graph {graph_id}: {e}") from e

        if raw is None:
            return None

        try:
            graph = Graph.model_validate_json(raw)
            graph.check_invariants()
        except (ValidationError, GraphInvariantError) as e:
            raise GraphStorageError(f"Stored graph {graph_id} is corrupt: {e}") from e
        return graph

    async def save(self, graph: Graph) -> None:
        redis = self._client()
        payload = graph.model_dump_json()
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.set(self._graph_key(graph.id), payload)
                pipe.sadd(self._index_key, graph.id)
                await pipe.execute()
        except RedisError as e:
            raise GraphStorageError(f"Failed to save graph {graph.id}: {e}") from e
        logger.debug(f"Saved graph {graph.id} to Redis ({len(payload)} bytes)")

    async def delete(self, graph_id: str) -> bool:
        redis = self._client()
        try:
            async with redis.pipeline(transaction=True) as pipe:
                pipe.delete(self._graph_key(graph_id))
                pipe.srem(self._index_key, graph_id)
                deleted, _ = await pipe.execute()
        except RedisError as e:
            raise GraphStorageError(f"Failed to delete graph {graph_id}: {e}") from e
        return bool(deleted)

    async def list(self) -> list[str]:
        redis = self._client()
        try:
            members = await redis.smembers(self._index_key)
        except RedisError as e:
            raise GraphStorageError(f"Failed to list graphs: {e}") from e
        return sorted(members)
