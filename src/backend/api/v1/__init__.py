"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.tokens import router as tokens_router

router = APIRouter()

router.include_router(tokens_router, prefix="/tokens", tags=["Vote Tokens"])
