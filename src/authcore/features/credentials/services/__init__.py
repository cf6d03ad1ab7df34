"""Credential services."""

from .credential_verifier import CredentialVerifier
from .reset_tokens import ResetTokenService, random_token

__all__ = [
    "CredentialVerifier",
    "ResetTokenService",
    "random_token",
]
