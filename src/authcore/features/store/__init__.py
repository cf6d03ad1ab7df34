"""Store feature for authcore.

Feature-First layout:
- entities/: KeyValueStore protocol
- adapters/: Redis and in-memory implementations
"""

from .entities.protocols import Clock, KeyValueStore
from .adapters.redis_adapter import RedisKeyValueStore
from .adapters.memory_adapter import MemoryKeyValueStore

__all__ = [
    "Clock",
    "KeyValueStore",
    "RedisKeyValueStore",
    "MemoryKeyValueStore",
]
