"""Graph storage backends."""

from .base import GraphStorage
from .memory import InMemoryGraphStorage
from .redis_storage import RedisGraphStorage

__all__ = [
    "GraphStorage",
    "InMemoryGraphStorage",
    "RedisGraphStorage",
]
