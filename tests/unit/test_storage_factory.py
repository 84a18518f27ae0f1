"""Tests for storage backend selection."""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import SecretStr

from mcp_knowledge_graph.config import StorageSettings
from mcp_knowledge_graph.storage.factory import create_storage_instance
from mcp_knowledge_graph.storage.memory import InMemoryGraphStorage


@pytest.mark.asyncio
async def test_memory_backend_by_default():
    storage = await create_storage_instance(StorageSettings(backend="memory"))
    assert isinstance(storage, InMemoryGraphStorage)


@pytest.mark.asyncio
async def test_redis_backend_receives_settings():
    with patch("mcp_knowledge_graph.storage.factory.RedisGraphStorage") as mock_cls:
        mock_cls.return_value.initialize = AsyncMock()

        storage = await create_storage_instance(
            StorageSettings(
                backend="redis",
                redis_url="redis://cache:6379/1",
                redis_password=SecretStr("pw"),
                key_prefix="x:",
                max_connections=8,
            )
        )

    mock_cls.assert_called_once_with(url="redis://cache:6379/1", password="pw", key_prefix="x:", max_connections=8)
    storage.initialize.assert_awaited_once()


@pytest.mark.asyncio
async def test_falls_back_to_global_settings():
    storage = await create_storage_instance()
    assert isinstance(storage, InMemoryGraphStorage)
