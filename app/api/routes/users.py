"""
User Endpoints

Users are created by the frontend on first sign-in and identified by the
"userUid" the identity provider assigns, which is also the "uid" claim of
their session token.
"""

import logging
from typing import Any, Optional, Union

from fastapi import APIRouter, Depends

from app.api.deps import (
    ADMIN_ROLE,
    REGULAR_ROLE,
    authenticate,
    authorize_admin,
    get_store,
    guard_admin_promotion,
)
from app.core.security import SUBJECT_CLAIM
from app.schemas import (
    AdminStatusResponse,
    DeleteResult,
    InsertResult,
    MessageResponse,
    UpdateResult,
    UserCreate,
)
from app.services.store import OWNER_FIELD, BaseDocumentStore, Collection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    dependencies=[Depends(authorize_admin)],
    summary="List Users (admin)",
)
async def list_users(store: BaseDocumentStore = Depends(get_store)) -> list[dict]:
    return await store.find_many(Collection.USERS)


@router.post(
    "",
    response_model=Union[MessageResponse, InsertResult],
    summary="Create User",
)
async def create_user(
    user: UserCreate,
    store: BaseDocumentStore = Depends(get_store),
) -> Union[MessageResponse, InsertResult]:
    """
    Register a user, once per email.

    Signing in again with a known email returns a notice instead of a
    second document. New users always start with the regular role.
    """
    existing = await store.find_one(Collection.USERS, {"email": user.email})
    if existing:
        return MessageResponse(message="User already exists")

    document = user.model_dump(exclude_none=True)
    document["role"] = REGULAR_ROLE

    result = await store.insert_one(Collection.USERS, document)
    logger.info(f"User {result.inserted_id} created ({user.email})")
    return InsertResult(**result.to_dict())


@router.patch(
    "/admin/{user_id}",
    response_model=UpdateResult,
    summary="Promote User to Admin",
)
async def promote_user(
    user_id: str,
    caller: Optional[dict[str, Any]] = Depends(guard_admin_promotion),
    store: BaseDocumentStore = Depends(get_store),
) -> UpdateResult:
    result = await store.update_by_id(Collection.USERS, user_id, {"role": ADMIN_ROLE})
    logger.info(
        f"User {user_id} promoted to admin by "
        f"{(caller or {}).get(SUBJECT_CLAIM, 'anonymous')} "
        f"(matched={result.matched_count})"
    )
    return UpdateResult(**result.to_dict())


@router.get(
    "/admin/{uid}",
    response_model=AdminStatusResponse,
    summary="Check Admin Status",
)
async def check_admin(
    uid: str,
    claims: dict[str, Any] = Depends(authenticate),
    store: BaseDocumentStore = Depends(get_store),
) -> AdminStatusResponse:
    """
    Report whether the caller is an admin.

    Asking about any identity other than your own always answers false.
    """
    if claims.get(SUBJECT_CLAIM) != uid:
        return AdminStatusResponse(admin=False)

    user = await store.find_one(Collection.USERS, {OWNER_FIELD: uid})
    return AdminStatusResponse(admin=bool(user) and user.get("role") == ADMIN_ROLE)


@router.delete(
    "/{user_id}",
    response_model=DeleteResult,
    summary="Delete User",
)
async def delete_user(
    user_id: str,
    store: BaseDocumentStore = Depends(get_store),
) -> DeleteResult:
    result = await store.delete_by_id(Collection.USERS, user_id)
    logger.info(f"Delete user {user_id}: deleted={result.deleted_count}")
    return DeleteResult(**result.to_dict())
