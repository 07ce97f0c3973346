"""
Signed vote token verification.

Verification runs two independent checks over a decoded token:

1. Signature - server_signature must be a valid RSA-SHA256 signature of
   vote_data (including vote_hash) under the server public key
2. Hash - vote_hash must equal the SHA-256 of vote_data without vote_hash

A token is valid only when both pass. Verification never raises: every
failure, expected or not, is folded into a TokenVerificationResult.
"""

import hmac
import re
from functools import lru_cache
from typing import Any

import structlog

from core.keystore import KeyStore, get_key_store
from core.signing import hash_data, verify_signature
from schemas.token import TokenVerificationResult, VerificationFailure
from services.token_service import DecodeError, decode_token

logger = structlog.get_logger(__name__)

URLSAFE_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")
LEGACY_TOKEN_RE = re.compile(r"[a-f0-9]{64}")


def is_legacy_token(token: str) -> bool:
    """Check for the pre-signature 64-hex-char token format."""
    return isinstance(token, str) and LEGACY_TOKEN_RE.fullmatch(token) is not None


def is_valid_token_format(token: str) -> bool:
    """
    Cheap format gate applied before full verification.

    Accepts URL-safe base64 strings and legacy hex tokens. This is not a
    security check.
    """
    if not isinstance(token, str):
        return False
    return URLSAFE_TOKEN_RE.fullmatch(token) is not None or is_legacy_token(token)


def compute_expected_hash(vote_data: dict[str, Any]) -> str:
    """Recompute vote_hash over vote_data minus the vote_hash field."""
    unhashed = {key: value for key, value in vote_data.items() if key != "vote_hash"}
    return hash_data(unhashed)


def _failure_reason(signature_valid: bool, hash_valid: bool) -> VerificationFailure:
    if not signature_valid and not hash_valid:
        return VerificationFailure.SIGNATURE_AND_HASH_MISMATCH
    if not signature_valid:
        return VerificationFailure.SIGNATURE_MISMATCH
    return VerificationFailure.HASH_MISMATCH


class TokenVerifier:
    """Verifies signed vote tokens against the server public key."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    def verify(self, token: str) -> TokenVerificationResult:
        """
        Decode and verify a token.

        Returns:
            TokenVerificationResult; is_valid is True only when both the
            signature and the hash checks pass
        """
        try:
            envelope = decode_token(token)
        except DecodeError as e:
            logger.info("token_malformed", error=str(e))
            return TokenVerificationResult(
                is_valid=False,
                error=str(e),
                reason=VerificationFailure.MALFORMED,
            )
        except Exception as e:
            logger.warning("token_decode_error", error=str(e), error_type=type(e).__name__)
            return TokenVerificationResult(
                is_valid=False,
                error=str(e),
                reason=VerificationFailure.ERROR,
            )

        vote_data = envelope.vote_data

        try:
            public_key = self.key_store.load_public_key()
            signature_valid = verify_signature(vote_data, envelope.server_signature, public_key)
            hash_valid = self._check_hash(vote_data)
        except Exception as e:
            logger.warning("token_verification_error", error=str(e), error_type=type(e).__name__)
            return TokenVerificationResult(
                is_valid=False,
                error=str(e),
                reason=VerificationFailure.ERROR,
            )

        is_valid = signature_valid and hash_valid
        if not is_valid:
            logger.info(
                "token_rejected",
                votacion_id=vote_data.get("votacion_id"),
                signature_valid=signature_valid,
                hash_valid=hash_valid,
            )

        return TokenVerificationResult(
            is_valid=is_valid,
            vote_data=vote_data,
            signature_valid=signature_valid,
            hash_valid=hash_valid,
            reason=None if is_valid else _failure_reason(signature_valid, hash_valid),
        )

    @staticmethod
    def _check_hash(vote_data: dict[str, Any]) -> bool:
        """Compare the embedded vote_hash with the recomputed one in constant time."""
        try:
            expected_hash = compute_expected_hash(vote_data)
        except (TypeError, ValueError, RecursionError) as e:
            logger.info("vote_data_not_canonicalizable", error=str(e))
            return False

        stored_hash = vote_data.get("vote_hash", "")
        return hmac.compare_digest(
            expected_hash.encode("utf-8"),
            str(stored_hash).encode("utf-8"),
        )


@lru_cache()
def get_token_verifier() -> TokenVerifier:
    """Get the TokenVerifier bound to the configured key store."""
    return TokenVerifier(get_key_store())


def verify_token(token: str) -> TokenVerificationResult:
    """Verify a token with the configured key store."""
    return get_token_verifier().verify(token)
