"""
Sliding-window slow-down for the credential-checking surface.

The count for a caller is estimated from two fixed-window counters: the
current window's count plus the previous window's count weighted by how much
of it still overlaps the sliding window.
"""

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, Optional

from ....config.constants import KeyNamespace
from ....config.settings import AuthCoreSettings
from ....core.exceptions.auth import RateLimitedError
from ...store.entities.protocols import Clock, KeyValueStore
from ..entities.policies import RateDecision, RateLimitPolicy, RateLimitPolicyTable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts requests per (caller, route class) and computes delays."""

    def __init__(
        self,
        store: KeyValueStore,
        policies: Optional[RateLimitPolicyTable] = None,
        clock: Optional[Clock] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.policies = policies or RateLimitPolicyTable()
        self._clock = clock or time.time
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        store: KeyValueStore,
        settings: AuthCoreSettings,
        routes: Optional[dict] = None,
        clock: Optional[Clock] = None,
    ) -> "RateLimiter":
        default = RateLimitPolicy(
            window=settings.rate_limit_window,
            delay_after=settings.rate_limit_delay_after,
            delay_ms=settings.rate_limit_delay_ms,
            max_delay_ms=settings.rate_limit_max_delay_ms,
        )
        return cls(store, RateLimitPolicyTable(default, routes), clock=clock)

    async def hit(self, caller_key: str, route_class: str) -> Optional[RateDecision]:
        """Count one request. Returns None for exempt route classes."""
        policy = self.policies.resolve(route_class)
        if policy is None:
            return None

        now = self._clock()
        index = int(now // policy.window)

        current = await self.store.incr(
            KeyNamespace.RATE_LIMIT.key(route_class, caller_key, index),
            2 * policy.window,
        )
        raw_previous = await self.store.get(
            KeyNamespace.RATE_LIMIT.key(route_class, caller_key, index - 1)
        )
        previous = int(raw_previous) if raw_previous else 0

        elapsed = (now - index * policy.window) / policy.window
        count = current + int(previous * (1 - elapsed))

        return RateDecision(
            count=count,
            limit=policy.limit,
            delay=policy.delay_for(count),
            remaining=max(0, policy.limit - count),
            reset_after=max(1, math.ceil((index + 1) * policy.window - now)),
        )

    async def throttle(self, caller_key: str, route_class: str) -> Optional[RateDecision]:
        """Count one request and wait out its delay.

        Raises:
            RateLimitedError: The route's hard limit is exceeded
        """
        decision = await self.hit(caller_key, route_class)
        if decision is None:
            return None

        policy = self.policies.resolve(route_class)
        if policy.hard_limit is not None and decision.count > policy.hard_limit:
            logger.warning(f"Hard limit exceeded on {route_class} by {caller_key}")
            raise RateLimitedError("Too many requests", retry_after=decision.reset_after)

        if decision.delay > 0:
            logger.debug(f"Delaying {route_class} for {caller_key} by {decision.delay}ms")
            await self._sleep(decision.delay_seconds)
        return decision
