"""Rate limit policies and decisions."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class RateLimitPolicy:
    """Slow-down policy for one route class.

    Requests beyond ``delay_after`` inside the window are delayed by
    ``delay_ms`` per extra request, capped at ``max_delay_ms``. Beyond
    ``hard_limit`` (when set) they are refused.
    """

    window: int = 15 * 60
    delay_after: int = 100
    delay_ms: int = 200
    max_delay_ms: int = 10_000
    hard_limit: Optional[int] = None

    def __post_init__(self):
        if self.window <= 0:
            raise ValueError("window must be positive")
        if self.delay_after < 0 or self.delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("delay settings must not be negative")
        if self.hard_limit is not None and self.hard_limit < 1:
            raise ValueError("hard_limit must be at least 1")

    def delay_for(self, count: int) -> int:
        """Delay in milliseconds for the ``count``-th request of the window."""
        if count <= self.delay_after:
            return 0
        return min((count - self.delay_after) * self.delay_ms, self.max_delay_ms)

    @property
    def limit(self) -> int:
        return self.hard_limit if self.hard_limit is not None else self.delay_after


@dataclass(frozen=True)
class RateDecision:
    """Outcome of one counted request."""

    count: int
    limit: int
    delay: int  # milliseconds
    remaining: int
    reset_after: int  # seconds until the current fixed window rolls over

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000.0


class RateLimitPolicyTable:
    """Single source of route exemptions and per-route policies.

    A route class maps to a policy, or to ``None`` when exempt. Unknown
    route classes get the default policy.
    """

    def __init__(
        self,
        default: Optional[RateLimitPolicy] = None,
        routes: Optional[Dict[str, Optional[RateLimitPolicy]]] = None,
    ):
        self.default = default or RateLimitPolicy()
        self._routes: Dict[str, Optional[RateLimitPolicy]] = dict(routes or {})

    def set_policy(self, route_class: str, policy: RateLimitPolicy) -> None:
        self._routes[route_class] = policy

    def exempt(self, route_class: str) -> None:
        self._routes[route_class] = None

    def is_exempt(self, route_class: str) -> bool:
        return route_class in self._routes and self._routes[route_class] is None

    def resolve(self, route_class: str) -> Optional[RateLimitPolicy]:
        """Policy for a route class, or None if it is exempt."""
        return self._routes.get(route_class, self.default)
