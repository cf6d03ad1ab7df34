"""Attempt governor feature module.

- AttemptGovernor: per-subject lockout with one security alert per episode
- RateLimiter: sliding-window slow-down per caller and route class
- RateLimitPolicyTable: route exemptions and per-route policies
"""

from .entities.policies import RateDecision, RateLimitPolicy, RateLimitPolicyTable
from .services.attempt_governor import AttemptGovernor
from .services.rate_limiter import RateLimiter

__all__ = [
    "AttemptGovernor",
    "RateLimiter",
    "RateDecision",
    "RateLimitPolicy",
    "RateLimitPolicyTable",
]
