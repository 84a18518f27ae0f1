"""
Storage backend factory for the MCP Knowledge Graph service.

Creates and initializes the backend selected by ``settings.storage.backend``.
"""

import logging

from ..config import StorageSettings
from .base import GraphStorage
from .memory import InMemoryGraphStorage
from .redis_storage import RedisGraphStorage

logger = logging.getLogger(__name__)


async def create_storage_instance(storage_settings: StorageSettings | None = None) -> GraphStorage:
    """
    Create and initialize the configured graph storage backend.

    Args:
        storage_settings: Explicit settings; defaults to ``settings.storage``

    Returns:
        Initialized GraphStorage instance
    """
    if storage_settings is None:
        from ..config import settings

        storage_settings = settings.storage

    logger.info(f"Creating {storage_settings.backend} graph storage backend instance...")

    if storage_settings.backend == "redis":
        password = storage_settings.redis_password.get_secret_value() if storage_settings.redis_password else None
        storage: GraphStorage = RedisGraphStorage(
            url=storage_settings.redis_url,
            password=password,
            key_prefix=storage_settings.key_prefix,
            max_connections=storage_settings.max_connections,
        )
    else:
        storage = InMemoryGraphStorage()
        logger.info("In-memory graph storage is volatile: graphs are lost on restart")

    await storage.initialize()
    logger.info(f"{type(storage).__name__} initialized successfully")

    return storage
