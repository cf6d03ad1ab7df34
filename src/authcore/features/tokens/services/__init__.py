"""Token feature services."""

from .keys import generate_signing_keypair, load_private_key, load_public_key
from .token_issuer import TokenIssuer, extract_bearer_token

__all__ = [
    "TokenIssuer",
    "extract_bearer_token",
    "generate_signing_keypair",
    "load_private_key",
    "load_public_key",
]
