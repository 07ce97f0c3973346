"""
Signed vote token issuing and decoding.

A token is a self-contained, server-signed record of a vote:

    base64url(json({
        "vote_data": {
            "votacion_id": 42,
            "respuestas": {...},
            "timestamp": "2024-01-01T00:00:00Z",
            "salt": "<32 hex chars>",
            "vote_hash": "<64 hex chars>"
        },
        "server_signature": "<base64>"
    }))

vote_hash is the SHA-256 of vote_data *before* vote_hash is inserted, and
server_signature covers vote_data *including* vote_hash.
"""

import base64
import binascii
import hashlib
import json
import re
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

import structlog

from core.config import settings
from core.keystore import KeyStore, get_key_store
from core.signing import canonicalize, hash_data, sign_data

logger = structlog.get_logger(__name__)

SALT_BYTES = 16

_URLSAFE_RE = re.compile(r"[A-Za-z0-9_-]*")


class DecodeError(Exception):
    """Raised when a token string is not valid URL-safe base64."""

    pass


class MalformedTokenError(DecodeError):
    """Raised when a decoded token is not a well-formed envelope."""

    pass


@dataclass(frozen=True)
class TokenEnvelope:
    """Decoded token: vote data plus the server signature over it."""

    vote_data: dict[str, Any]
    server_signature: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "vote_data": self.vote_data,
            "server_signature": self.server_signature,
        }


# =============================================================================
# URL-safe base64
# =============================================================================


def encode_urlsafe(raw: bytes) -> str:
    """Base64 with '+' -> '-', '/' -> '_' and no '=' padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_urlsafe(value: str) -> bytes:
    """
    Reverse encode_urlsafe(), restoring the padding.

    Raises:
        DecodeError: On characters outside [A-Za-z0-9_-] or an impossible length
    """
    if not isinstance(value, str) or not _URLSAFE_RE.fullmatch(value):
        raise DecodeError("Token contains characters outside the URL-safe base64 alphabet")

    remainder = len(value) % 4
    if remainder == 1:
        raise DecodeError("Token length is not a valid base64 length")

    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 data: {e}") from e


# =============================================================================
# Token decoding
# =============================================================================


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number {name} is not allowed in a token")


def decode_token(token: str) -> TokenEnvelope:
    """
    Decode an encoded token into its envelope without verifying it.

    Raises:
        DecodeError: If the token is not URL-safe base64
        MalformedTokenError: If the payload is not a JSON envelope
    """
    raw = decode_urlsafe(token)

    # ValueError covers JSONDecodeError, NaN/Infinity and oversized integers
    try:
        payload = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise MalformedTokenError("Token payload is not valid JSON") from e

    if not isinstance(payload, dict) or "vote_data" not in payload or "server_signature" not in payload:
        raise MalformedTokenError("Invalid token format: missing vote_data or server_signature")

    vote_data = payload["vote_data"]
    server_signature = payload["server_signature"]
    if not isinstance(vote_data, dict) or not isinstance(server_signature, str):
        raise MalformedTokenError("Invalid token format: unexpected field types")

    return TokenEnvelope(vote_data=vote_data, server_signature=server_signature)


def encode_envelope(envelope: TokenEnvelope) -> str:
    """Serialize an envelope to its bearer string."""
    return encode_urlsafe(canonicalize(envelope.to_dict()))


def current_timestamp() -> str:
    """Current UTC instant as ISO-8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def generate_legacy_token() -> str:
    """
    Generate an unsigned 64-hex-char token.

    Deprecated: kept for records created before signed tokens existed.
    These tokens carry no vote data and cannot be verified; use
    TokenService.issue_token() instead.
    """
    data = f"{time.time()}{secrets.token_urlsafe(24)}{settings.SECRET_KEY}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


# =============================================================================
# Token issuing
# =============================================================================


class TokenService:
    """Issues signed vote tokens with the server private key."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    def build_vote_data(
        self,
        votacion_id: int,
        respuestas: Mapping[str, Any],
        timestamp: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Build vote data with a fresh salt and its embedded vote_hash.

        Field order is fixed here and must never change: the hash and the
        signature are computed over this exact ordering.
        """
        if isinstance(votacion_id, bool) or not isinstance(votacion_id, int) or votacion_id < 1:
            raise ValueError("votacion_id must be a positive integer")

        vote_data: dict[str, Any] = {
            "votacion_id": votacion_id,
            "respuestas": dict(respuestas),
            "timestamp": timestamp or current_timestamp(),
            "salt": secrets.token_hex(SALT_BYTES),
        }
        vote_data["vote_hash"] = hash_data(vote_data)
        return vote_data

    def issue_token(
        self,
        votacion_id: int,
        respuestas: Mapping[str, Any],
        timestamp: Optional[str] = None,
    ) -> str:
        """
        Issue a signed token for a vote.

        Args:
            votacion_id: Id of the votacion the answers belong to
            respuestas: Answers keyed by question id (order is preserved)
            timestamp: ISO-8601 timestamp, defaults to now

        Returns:
            URL-safe bearer token

        Raises:
            KeyNotFoundError: If the private key has not been generated
            SigningError: If the private key cannot be used
        """
        vote_data = self.build_vote_data(votacion_id, respuestas, timestamp)
        signature = sign_data(vote_data, self.key_store.load_private_key())

        token = encode_envelope(TokenEnvelope(vote_data=vote_data, server_signature=signature))

        logger.info(
            "token_issued",
            votacion_id=votacion_id,
            vote_hash=vote_data["vote_hash"],
        )
        return token


@lru_cache()
def get_token_service() -> TokenService:
    """Get the TokenService bound to the configured key store."""
    return TokenService(get_key_store())
