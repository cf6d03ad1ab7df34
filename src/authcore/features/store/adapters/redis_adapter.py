"""Redis implementation of the key-value store protocol."""

import logging
from typing import Any, Awaitable, Callable, List, Optional

import redis.asyncio as redis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from ....core.exceptions.infrastructure import (
    InternalFailureError,
    StoreConnectionError,
    StoreTimeoutError,
)
from ..entities.protocols import KeyValueStore

logger = logging.getLogger(__name__)

# INCR and anchor the window on creation; atomic on the server.
INCR_WITH_TTL_SCRIPT = """
local current = redis.call("INCR", KEYS[1])
if redis.call("TTL", KEYS[1]) == -1 then
    redis.call("EXPIRE", KEYS[1], ARGV[1])
end
return current
"""

# DECR only a live positive counter so a concurrent reset is not undone.
DECR_IF_POSITIVE_SCRIPT = """
local current = tonumber(redis.call("GET", KEYS[1]))
if current and current > 0 then
    return redis.call("DECR", KEYS[1])
end
return 0
"""

COMPARE_AND_DELETE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
else
    return 0
end
"""


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed key-value store."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        redis_password: Optional[str] = None,
        redis_db: int = 0,
        key_prefix: str = "authcore",
        timeout: float = 5.0,
    ):
        """Initialize Redis key-value store."""
        self.redis_url = redis_url
        self.redis_password = redis_password
        self.redis_db = redis_db
        self.key_prefix = key_prefix
        self.timeout = timeout

        self._redis: Optional[redis.Redis] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()

    async def connect(self) -> None:
        """Connect to Redis."""
        try:
            self._redis = redis.from_url(
                self.redis_url,
                password=self.redis_password,
                db=self.redis_db,
                decode_responses=True,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
            )
            await self._redis.ping()
            logger.info("Connected to Redis key-value store")

        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StoreConnectionError(f"Redis connection failed: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

    def _ensure_connected(self) -> redis.Redis:
        """Ensure Redis connection is active."""
        if not self._redis:
            raise StoreConnectionError("Redis not connected. Use async context manager or call connect().")
        return self._redis

    def _make_key(self, key: str) -> str:
        """Add prefix to store key."""
        return f"{self.key_prefix}:{key}"

    async def _execute(self, operation: str, command: Callable[[redis.Redis], Awaitable[Any]]) -> Any:
        """Run a Redis command, translating driver faults."""
        client = self._ensure_connected()
        try:
            return await command(client)

        except RedisTimeoutError as e:
            logger.error(f"Redis {operation} timed out: {e}")
            raise StoreTimeoutError(f"Store operation '{operation}' timed out") from e

        except RedisConnectionError as e:
            logger.error(f"Redis connection lost during {operation}: {e}")
            raise StoreConnectionError(f"Store connection lost during '{operation}'") from e

        except RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise InternalFailureError(f"Store operation '{operation}' failed") from e

    async def get(self, key: str) -> Optional[str]:
        full_key = self._make_key(key)
        return await self._execute("get", lambda r: r.get(full_key))

    async def mget(self, *keys: str) -> List[Optional[str]]:
        if not keys:
            return []
        full_keys = [self._make_key(key) for key in keys]
        return await self._execute("mget", lambda r: r.mget(full_keys))

    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        nx: bool = False,
    ) -> bool:
        full_key = self._make_key(key)
        result = await self._execute(
            "set", lambda r: r.set(full_key, value, ex=ttl, nx=nx)
        )
        return bool(result)

    async def replace(self, key: str, value: str, ttl: Optional[int] = None) -> Optional[str]:
        full_key = self._make_key(key)
        return await self._execute(
            "replace", lambda r: r.set(full_key, value, ex=ttl, get=True)
        )

    async def pop(self, key: str) -> Optional[str]:
        full_key = self._make_key(key)
        return await self._execute("pop", lambda r: r.getdel(full_key))

    async def delete_if_equals(self, key: str, expected: str) -> bool:
        full_key = self._make_key(key)
        result = await self._execute(
            "delete_if_equals",
            lambda r: r.eval(COMPARE_AND_DELETE_SCRIPT, 1, full_key, expected),
        )
        return bool(result)

    async def incr(self, key: str, ttl: int) -> int:
        full_key = self._make_key(key)
        result = await self._execute(
            "incr", lambda r: r.eval(INCR_WITH_TTL_SCRIPT, 1, full_key, ttl)
        )
        return int(result)

    async def decr(self, key: str) -> int:
        full_key = self._make_key(key)
        result = await self._execute(
            "decr", lambda r: r.eval(DECR_IF_POSITIVE_SCRIPT, 1, full_key)
        )
        return int(result)

    async def ttl(self, key: str) -> Optional[int]:
        full_key = self._make_key(key)
        remaining = await self._execute("ttl", lambda r: r.ttl(full_key))
        # -2: missing, -1: no expiry
        if remaining is None or remaining < 0:
            return None
        return int(remaining)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        full_keys = [self._make_key(key) for key in keys]
        deleted = await self._execute("delete", lambda r: r.delete(*full_keys))
        logger.debug(f"Deleted {deleted} of {len(keys)} keys")
        return int(deleted)

    async def ping(self) -> bool:
        try:
            return bool(await self._execute("ping", lambda r: r.ping()))
        except InternalFailureError:
            return False
