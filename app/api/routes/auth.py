"""Token issuance."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from app.api.deps import get_token_service
from app.core.security import SUBJECT_CLAIM, TokenService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/jwt",
    response_model=str,
    summary="Issue Session Token",
)
async def issue_token(
    claims: dict[str, Any] = Body(..., examples=[{"uid": "Zr1xQ0b8fZ..."}]),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Sign the posted claims into a one-hour session token.

    The frontend calls this right after the identity provider signs the
    user in, posting {"uid": ...}, and stores the returned token string
    as-is. Claims setting "iat" or "exp", or a non-string "uid", are
    rejected with 400.
    """
    logger.debug(f"Issuing token for uid={claims.get(SUBJECT_CLAIM)!r}")
    return tokens.issue(claims)
