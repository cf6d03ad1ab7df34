"""Governor entities."""

from .policies import RateDecision, RateLimitPolicy, RateLimitPolicyTable

__all__ = [
    "RateDecision",
    "RateLimitPolicy",
    "RateLimitPolicyTable",
]
