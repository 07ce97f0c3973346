"""
Public vote token verification endpoints.

Anyone holding a token can check that it was issued by this server and
has not been altered, without authenticating.
"""

from datetime import datetime, timezone
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from core.keystore import KeyNotFoundError, KeyStore, get_key_store
from repositories.votacion_repository import (
    VotacionRepositoryProtocol,
    get_votacion_repository,
)
from schemas.token import (
    PublicKeyResponse,
    PublicVoteData,
    TokenVerificationResponse,
    VerificationDetails,
)
from services.token_verifier import (
    TokenVerifier,
    get_token_verifier,
    is_valid_token_format,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/verify/{token}", response_model=TokenVerificationResponse)
async def verify_token(
    token: str,
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    votaciones: Annotated[VotacionRepositoryProtocol, Depends(get_votacion_repository)],
) -> TokenVerificationResponse:
    """
    Verify a signed vote token.

    Always responds 200; the outcome is reported in the body.
    """
    if not is_valid_token_format(token):
        return TokenVerificationResponse(
            is_valid=False,
            error="Invalid token format",
            token=token,
            verification_details=VerificationDetails(format_valid=False),
        )

    result = verifier.verify(token)

    if not result.is_valid:
        return TokenVerificationResponse(
            is_valid=False,
            error=result.error or "Invalid or corrupted token",
            token=token,
            verification_details=VerificationDetails(
                format_valid=True,
                signature_valid=result.signature_valid,
                hash_valid=result.hash_valid,
            ),
        )

    vote_data = result.vote_data or {}
    votacion = None
    if "votacion_id" in vote_data:
        votacion = await votaciones.get_by_id(vote_data["votacion_id"])

    logger.info(
        "token_verified",
        votacion_id=vote_data.get("votacion_id"),
        votacion_exists=votacion is not None,
    )

    return TokenVerificationResponse(
        is_valid=True,
        token=token,
        vote_data=PublicVoteData(
            votacion_id=vote_data.get("votacion_id"),
            respuestas=vote_data.get("respuestas"),
            timestamp=vote_data.get("timestamp"),
            vote_hash=vote_data.get("vote_hash"),
        ),
        votacion=votacion,
        verification_details=VerificationDetails(
            format_valid=True,
            signature_valid=result.signature_valid,
            hash_valid=result.hash_valid,
            votacion_exists=votacion is not None,
            verified_at=datetime.now(timezone.utc),
        ),
    )


@router.get("/public-key", response_model=PublicKeyResponse)
async def get_public_key(
    key_store: Annotated[KeyStore, Depends(get_key_store)],
) -> PublicKeyResponse:
    """Get the server public key used to sign vote tokens."""
    try:
        public_key = key_store.load_public_key()
    except KeyNotFoundError as e:
        logger.error("public_key_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Public key not available", "message": str(e)},
        )

    return PublicKeyResponse(public_key=public_key)
