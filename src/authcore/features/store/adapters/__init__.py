"""Key-value store adapters - Redis and in-memory implementations."""

from .redis_adapter import RedisKeyValueStore
from .memory_adapter import MemoryKeyValueStore

__all__ = [
    "RedisKeyValueStore",
    "MemoryKeyValueStore",
]
