"""
Canonical serialization, hashing and RSA-SHA256 signatures for vote data.

Signing and verification only agree when both sides produce byte-identical
input, so every hash and signature in the system goes through canonicalize().

Canonical form:
1. Compact JSON (no whitespace between tokens)
2. Keys in insertion order (NOT sorted)
3. UTF-8, with non-ASCII characters and forward slashes left unescaped
"""

import base64
import binascii
import hashlib
import json
from collections.abc import Mapping
from typing import Any

import structlog
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from core.keystore import CryptoProviderError

logger = structlog.get_logger(__name__)


class SigningError(CryptoProviderError):
    """Raised when data cannot be signed with the server private key."""

    pass


def canonicalize(data: Mapping[str, Any]) -> bytes:
    """Serialize a mapping to its canonical JSON bytes."""
    return json.dumps(
        data,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    ).encode("utf-8")


def hash_data(data: Mapping[str, Any]) -> str:
    """Hex SHA-256 digest of the canonical form of data."""
    return hashlib.sha256(canonicalize(data)).hexdigest()


def sign_data(data: Mapping[str, Any], private_key_pem: str) -> str:
    """
    Sign the canonical form of data with RSA PKCS#1 v1.5 / SHA-256.

    Args:
        data: Mapping to sign
        private_key_pem: PEM-encoded RSA private key

    Returns:
        Base64-encoded signature

    Raises:
        SigningError: If the key cannot be loaded or signing fails
    """
    try:
        private_key = serialization.load_pem_private_key(
            private_key_pem.encode("ascii"),
            password=None,
        )
    except Exception as e:
        logger.error("private_key_load_failed", error=str(e))
        raise SigningError(f"Failed to load private key: {e}") from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise SigningError("Server private key is not an RSA key")

    try:
        signature = private_key.sign(
            canonicalize(data),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        logger.error("signing_failed", error=str(e))
        raise SigningError(f"Failed to sign data: {e}") from e

    return base64.b64encode(signature).decode("ascii")


def verify_signature(
    data: Mapping[str, Any],
    signature: str,
    public_key_pem: str,
) -> bool:
    """
    Check an RSA-SHA256 signature over the canonical form of data.

    Never raises: a malformed signature, a malformed key, non-serializable
    data or a mismatch all return False.
    """
    try:
        raw_signature = base64.b64decode(signature, validate=True)
    except (binascii.Error, TypeError, ValueError):
        logger.info("signature_not_base64")
        return False

    try:
        public_key = serialization.load_pem_public_key(public_key_pem.encode("ascii"))
        if not isinstance(public_key, rsa.RSAPublicKey):
            return False

        public_key.verify(
            raw_signature,
            canonicalize(data),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return True
    except Exception as e:
        logger.info("signature_verification_failed", error_type=type(e).__name__)
        return False
