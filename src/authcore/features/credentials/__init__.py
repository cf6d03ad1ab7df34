"""Credential feature module - password hashing and reset tokens."""

from .services.credential_verifier import CredentialVerifier
from .services.reset_tokens import ResetTokenService, random_token

__all__ = [
    "CredentialVerifier",
    "ResetTokenService",
    "random_token",
]
