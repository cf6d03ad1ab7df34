"""Token feature module - compact signed session and step-up tokens.

- TokenIssuer: HS256 session tokens, EdDSA step-up tokens, verification
- TokenClaims: the validated seven-claim payload
- generate_signing_keypair: Ed25519 provisioning helper

Usage Example:
```python
issuer = TokenIssuer.from_settings(get_settings())
token = issuer.issue_session_token("alice", session_id, ttl_minutes=60 * 24)
claims = issuer.verify(token)
```
"""

from .entities.claims import REGISTERED_CLAIMS, TokenClaims
from .services.keys import generate_signing_keypair
from .services.token_issuer import TokenIssuer, extract_bearer_token

__all__ = [
    "REGISTERED_CLAIMS",
    "TokenClaims",
    "TokenIssuer",
    "extract_bearer_token",
    "generate_signing_keypair",
]
