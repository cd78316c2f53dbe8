from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from product_api.core.config import Settings
from product_api.core.errors import KeyMaterialError


@dataclass(frozen=True)
class KeyPair:
    """
    PEM-encoded RSA signing key pair.

    Loaded once at startup and never mutated, so it is shared freely between
    request handlers without locking.
    """

    private_pem: str
    public_pem: str


def _decode_pem(raw: Optional[str], name: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise KeyMaterialError(f"{name} is not configured")
    try:
        return base64.b64decode(value, validate=True).decode("ascii")
    except (binascii.Error, ValueError) as e:
        raise KeyMaterialError(f"{name} is not valid base64-encoded PEM") from e


def load_key_pair_from_pem(private_pem: str, public_pem: str) -> KeyPair:
    try:
        private_key = serialization.load_pem_private_key(private_pem.encode("ascii"), password=None)
    except (ValueError, TypeError) as e:
        raise KeyMaterialError("PRIVATE_KEY could not be parsed") from e
    try:
        public_key = serialization.load_pem_public_key(public_pem.encode("ascii"))
    except (ValueError, TypeError) as e:
        raise KeyMaterialError("PUBLIC_KEY could not be parsed") from e

    if not isinstance(private_key, rsa.RSAPrivateKey) or not isinstance(public_key, rsa.RSAPublicKey):
        raise KeyMaterialError("Signing keys must be RSA keys")
    if private_key.public_key().public_numbers() != public_key.public_numbers():
        raise KeyMaterialError("PUBLIC_KEY does not match PRIVATE_KEY")

    return KeyPair(private_pem=private_pem, public_pem=public_pem)


def load_key_pair(settings: Settings) -> KeyPair:
    """Decode and validate the configured key pair. Raises KeyMaterialError."""
    private_pem = _decode_pem(settings.private_key, "PRIVATE_KEY")
    public_pem = _decode_pem(settings.public_key, "PUBLIC_KEY")
    return load_key_pair_from_pem(private_pem, public_pem)
