"""Governor services."""

from .attempt_governor import AttemptGovernor
from .rate_limiter import RateLimiter

__all__ = [
    "AttemptGovernor",
    "RateLimiter",
]
