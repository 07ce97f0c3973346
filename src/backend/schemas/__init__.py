"""Schemas module initialization."""

from schemas.token import (
    PublicKeyResponse,
    TokenVerificationResponse,
    TokenVerificationResult,
    VerificationDetails,
    VerificationFailure,
)
from schemas.votacion import VotacionSummary

__all__ = [
    "PublicKeyResponse",
    "TokenVerificationResponse",
    "TokenVerificationResult",
    "VerificationDetails",
    "VerificationFailure",
    "VotacionSummary",
]
