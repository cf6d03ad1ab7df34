"""Key-value store protocol for authcore.

Session Store, OTP Engine and Attempt Governor keep every piece of shared
state behind this interface. Correctness under concurrent workers relies on
the atomic primitives listed here, never on in-process locks.
"""

from abc import abstractmethod
from typing import Callable, List, Optional, Protocol, runtime_checkable

Clock = Callable[[], float]


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for the shared key-value store.

    Keys passed in are logical keys; implementations apply their own prefix.
    Every method raises ``InternalFailureError`` (or a subclass) on driver
    failure.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get value, or None when absent or expired."""
        ...

    @abstractmethod
    async def mget(self, *keys: str) -> List[Optional[str]]:
        """Get several values in one round trip."""
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        nx: bool = False,
    ) -> bool:
        """Set value with optional TTL; with ``nx`` only if absent.

        Returns True when the value was written.
        """
        ...

    @abstractmethod
    async def replace(self, key: str, value: str, ttl: Optional[int] = None) -> Optional[str]:
        """Atomically set value and return the previous one."""
        ...

    @abstractmethod
    async def pop(self, key: str) -> Optional[str]:
        """Atomically get and delete a value."""
        ...

    @abstractmethod
    async def delete_if_equals(self, key: str, expected: str) -> bool:
        """Atomically delete a key only while it holds ``expected``."""
        ...

    @abstractmethod
    async def incr(self, key: str, ttl: int) -> int:
        """Atomically increment a counter.

        The TTL is applied when the counter is created, so the window is
        anchored at the first increment.
        """
        ...

    @abstractmethod
    async def decr(self, key: str) -> int:
        """Atomically decrement an existing counter, keeping its TTL.

        A missing or zero counter is left alone and 0 is returned.
        """
        ...

    @abstractmethod
    async def ttl(self, key: str) -> Optional[int]:
        """Remaining TTL in seconds, None when absent or persistent."""
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """Check store connectivity."""
        ...
