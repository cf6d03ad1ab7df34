"""In-memory key-value store for tests and single-process development.

Mirrors the Redis semantics the core depends on (TTL anchoring on first
increment, SET NX, SET GET, GETDEL). State lives in one process only, so it
must not back a multi-worker deployment.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..entities.protocols import Clock, KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class MemoryStoreEntry:
    """Stored value with its absolute expiry."""
    value: str
    expires_at: Optional[float] = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed key-value store with lazy expiry."""

    def __init__(self, key_prefix: str = "authcore", clock: Optional[Clock] = None):
        self.key_prefix = key_prefix
        self._clock = clock or time.time
        self._data: Dict[str, MemoryStoreEntry] = {}
        self._lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def _expiry(self, ttl: Optional[int]) -> Optional[float]:
        if ttl is None:
            return None
        return self._clock() + ttl

    def _live(self, full_key: str) -> Optional[MemoryStoreEntry]:
        """Get a live entry, dropping it if expired. Caller holds the lock."""
        entry = self._data.get(full_key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._data[full_key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._live(self._make_key(key))
            return entry.value if entry else None

    async def mget(self, *keys: str) -> List[Optional[str]]:
        async with self._lock:
            values = []
            for key in keys:
                entry = self._live(self._make_key(key))
                values.append(entry.value if entry else None)
            return values

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        nx: bool = False,
    ) -> bool:
        async with self._lock:
            full_key = self._make_key(key)
            if nx and self._live(full_key) is not None:
                return False
            self._data[full_key] = MemoryStoreEntry(value=value, expires_at=self._expiry(ttl))
            return True

    async def replace(self, key: str, value: str, ttl: Optional[int] = None) -> Optional[str]:
        async with self._lock:
            full_key = self._make_key(key)
            previous = self._live(full_key)
            self._data[full_key] = MemoryStoreEntry(value=value, expires_at=self._expiry(ttl))
            return previous.value if previous else None

    async def pop(self, key: str) -> Optional[str]:
        async with self._lock:
            full_key = self._make_key(key)
            entry = self._live(full_key)
            if entry is None:
                return None
            del self._data[full_key]
            return entry.value

    async def delete_if_equals(self, key: str, expected: str) -> bool:
        async with self._lock:
            full_key = self._make_key(key)
            entry = self._live(full_key)
            if entry is None or entry.value != expected:
                return False
            del self._data[full_key]
            return True

    async def incr(self, key: str, ttl: int) -> int:
        async with self._lock:
            full_key = self._make_key(key)
            entry = self._live(full_key)
            if entry is None:
                entry = MemoryStoreEntry(value="0", expires_at=self._expiry(ttl))
                self._data[full_key] = entry
            elif entry.expires_at is None:
                entry.expires_at = self._expiry(ttl)
            entry.value = str(int(entry.value) + 1)
            return int(entry.value)

    async def decr(self, key: str) -> int:
        async with self._lock:
            entry = self._live(self._make_key(key))
            if entry is None or int(entry.value) <= 0:
                return 0
            entry.value = str(int(entry.value) - 1)
            return int(entry.value)

    async def ttl(self, key: str) -> Optional[int]:
        async with self._lock:
            entry = self._live(self._make_key(key))
            if entry is None or entry.expires_at is None:
                return None
            return max(0, int(round(entry.expires_at - self._clock())))

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            deleted = 0
            for key in keys:
                full_key = self._make_key(key)
                if self._live(full_key) is not None:
                    del self._data[full_key]
                    deleted += 1
            return deleted

    async def ping(self) -> bool:
        return True

    async def clear(self) -> None:
        """Drop every key."""
        async with self._lock:
            self._data.clear()
            logger.debug("Memory store cleared")
