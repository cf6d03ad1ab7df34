"""Ed25519 key helpers for step-up tokens."""

from typing import Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from ....core.exceptions.infrastructure import ConfigurationError


def load_private_key(pem: str) -> Ed25519PrivateKey:
    """Load a PKCS8 PEM Ed25519 private key."""
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f"Cannot load step-up private key: {e}") from e

    if not isinstance(key, Ed25519PrivateKey):
        raise ConfigurationError("Step-up private key must be an Ed25519 key")
    return key


def load_public_key(pem: str) -> Ed25519PublicKey:
    """Load an SPKI PEM Ed25519 public key."""
    try:
        key = serialization.load_pem_public_key(pem.encode("utf-8"))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(f"Cannot load step-up public key: {e}") from e

    if not isinstance(key, Ed25519PublicKey):
        raise ConfigurationError("Step-up public key must be an Ed25519 key")
    return key


def generate_signing_keypair() -> Tuple[str, str]:
    """Generate a fresh Ed25519 key pair.

    Returns:
        Tuple of (PKCS8 private PEM, SPKI public PEM).
    """
    private_key = Ed25519PrivateKey.generate()

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem.decode("utf-8"), public_pem.decode("utf-8")
