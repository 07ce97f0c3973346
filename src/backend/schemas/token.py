"""
Signed vote token schemas.

These schemas describe verification outcomes and the public
verification API responses.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from schemas.votacion import VotacionSummary


class VerificationFailure(str, Enum):
    """Why a token failed verification."""

    MALFORMED = "malformed"
    SIGNATURE_MISMATCH = "signature_mismatch"
    HASH_MISMATCH = "hash_mismatch"
    SIGNATURE_AND_HASH_MISMATCH = "signature_and_hash_mismatch"
    ERROR = "error"


class TokenVerificationResult(BaseModel):
    """
    Outcome of verifying a signed vote token.

    Both checks are always run, so signature_valid and hash_valid are
    reported independently even when the token is invalid.
    """

    is_valid: bool
    vote_data: Optional[dict[str, Any]] = None
    signature_valid: bool = False
    hash_valid: bool = False
    error: Optional[str] = None
    reason: Optional[VerificationFailure] = None


class PublicVoteData(BaseModel):
    """Vote data exposed by the verification endpoint (salt omitted)."""

    votacion_id: Any
    respuestas: Any
    timestamp: Any
    vote_hash: Any


class VerificationDetails(BaseModel):
    """Per-check breakdown of a token verification."""

    format_valid: bool
    signature_valid: bool = False
    hash_valid: bool = False
    votacion_exists: bool = False
    verified_at: Optional[datetime] = None


class TokenVerificationResponse(BaseModel):
    """Response of the public token verification endpoint."""

    is_valid: bool
    error: Optional[str] = None
    token: str
    vote_data: Optional[PublicVoteData] = None
    votacion: Optional[VotacionSummary] = None
    verification_details: VerificationDetails


class PublicKeyResponse(BaseModel):
    """Server public key for offline token verification."""

    public_key: str = Field(..., description="PEM-encoded RSA public key")
    format: str = "PEM"
    algorithm: str = "RSA-2048"
    signature_algorithm: str = "SHA256withRSA"
