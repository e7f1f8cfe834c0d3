"""
Cart Endpoints

Cart items carry their owner's "userUid". Listing is scoped to the
caller's own token subject; adding and removing items is open.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import authenticate, get_store
from app.core.exceptions import ForbiddenError
from app.core.security import SUBJECT_CLAIM
from app.schemas import CartItemCreate, DeleteResult, InsertResult
from app.services.store import OWNER_FIELD, BaseDocumentStore, Collection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carts", tags=["Carts"])


@router.post("", response_model=InsertResult, summary="Add Item to Cart")
async def create_cart_item(
    item: CartItemCreate,
    store: BaseDocumentStore = Depends(get_store),
) -> InsertResult:
    result = await store.insert_one(Collection.CARTS, item.model_dump(exclude_none=True))
    return InsertResult(**result.to_dict())


@router.get("", summary="List Cart Items")
async def list_cart_items(
    uid: Optional[str] = Query(None, description="Cart owner; must be the caller"),
    claims: dict[str, Any] = Depends(authenticate),
    store: BaseDocumentStore = Depends(get_store),
) -> list[dict]:
    """
    Return the caller's cart.

    No uid yields an empty list; another user's uid is forbidden.
    """
    if not uid:
        return []

    if uid != claims.get(SUBJECT_CLAIM):
        logger.info(f"Cart access denied: uid={uid!r} caller={claims.get(SUBJECT_CLAIM)!r}")
        raise ForbiddenError("Forbidden access to another user's cart")

    return await store.find_many(Collection.CARTS, {OWNER_FIELD: uid})


@router.delete("/{item_id}", response_model=DeleteResult, summary="Remove Cart Item")
async def delete_cart_item(
    item_id: str,
    store: BaseDocumentStore = Depends(get_store),
) -> DeleteResult:
    result = await store.delete_by_id(Collection.CARTS, item_id)
    return DeleteResult(**result.to_dict())
