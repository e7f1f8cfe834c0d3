"""
Request Dependencies and Access Guards

Collaborators (settings, store, payment service, token service) are built
once by create_app() and live on app.state; the get_* dependencies hand
them to route handlers so tests can build an app around fakes.

Guards:
    - authenticate: bearer token must verify; claims land on request.state
    - authorize_admin: depends on authenticate, then checks the caller's
      user document holds role "admin" (read from the store every call)
"""

import logging
from typing import Any, Optional

from fastapi import Depends, Request

from app.core.config import Settings
from app.core.exceptions import (
    ForbiddenError,
    InvalidCredentialError,
    MissingCredentialError,
)
from app.core.security import SUBJECT_CLAIM, TokenService
from app.services.payment import BasePaymentService
from app.services.store import OWNER_FIELD, BaseDocumentStore, Collection

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
REGULAR_ROLE = "regular"


# =============================================================================
# COLLABORATORS
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> BaseDocumentStore:
    return request.app.state.store


def get_payment_service(request: Request) -> BasePaymentService:
    return request.app.state.payment_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


# =============================================================================
# GUARDS
# =============================================================================

def authenticate_request(request: Request, tokens: TokenService) -> dict[str, Any]:
    """
    Verify the request's bearer token.

    Raises:
        MissingCredentialError: No Authorization header
        InvalidCredentialError: Header is not "Bearer <token>" or the token
            fails verification
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        logger.info(f"Rejected {request.method} {request.url.path}: no Authorization header")
        raise MissingCredentialError()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        logger.info(f"Rejected {request.method} {request.url.path}: malformed Authorization header")
        raise InvalidCredentialError()

    try:
        claims = tokens.verify(token.strip())
    except InvalidCredentialError as e:
        logger.info(f"Rejected {request.method} {request.url.path}: {e.message}")
        raise

    request.state.claims = claims
    return claims


async def require_admin(claims: dict[str, Any], store: BaseDocumentStore) -> dict:
    """
    Check that the authenticated subject is an admin user.

    Returns:
        dict: The caller's user document

    Raises:
        ForbiddenError: No user matches the subject, or its role is not admin
    """
    uid: Optional[str] = claims.get(SUBJECT_CLAIM)
    if not isinstance(uid, str) or not uid:
        logger.info("Admin check failed: no usable subject in claims")
        raise ForbiddenError("Admin access required")

    user = await store.find_one(Collection.USERS, {OWNER_FIELD: uid})

    if user is None or user.get("role") != ADMIN_ROLE:
        logger.info(f"Admin check failed for uid={uid!r}")
        raise ForbiddenError("Admin access required")

    return user


async def authenticate(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """Dependency: require a valid bearer token, return its claims."""
    return authenticate_request(request, tokens)


async def authorize_admin(
    claims: dict[str, Any] = Depends(authenticate),
    store: BaseDocumentStore = Depends(get_store),
) -> dict[str, Any]:
    """Dependency: require an admin caller; runs after authenticate."""
    await require_admin(claims, store)
    return claims


async def guard_admin_promotion(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    tokens: TokenService = Depends(get_token_service),
    store: BaseDocumentStore = Depends(get_store),
) -> Optional[dict[str, Any]]:
    """
    Dependency for role promotion.

    With OPEN_ADMIN_PROMOTION enabled the route is open to anyone, which
    lets a fresh deployment bootstrap its first admin. Otherwise it needs
    an admin caller like every other admin write.
    """
    if settings.open_admin_promotion:
        return None

    claims = authenticate_request(request, tokens)
    await require_admin(claims, store)
    return claims
