"""Token feature entities."""

from .claims import REGISTERED_CLAIMS, TokenClaims

__all__ = [
    "REGISTERED_CLAIMS",
    "TokenClaims",
]
