"""Menu endpoints: public reads, admin-only writes."""

import logging

from fastapi import APIRouter, Depends

from app.api.deps import authorize_admin, get_store
from app.schemas import DeleteResult, InsertResult, MenuItemCreate
from app.services.store import BaseDocumentStore, Collection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get("", summary="List Menu Items")
async def list_menu_items(store: BaseDocumentStore = Depends(get_store)) -> list[dict]:
    return await store.find_many(Collection.MENU)


@router.post(
    "",
    response_model=InsertResult,
    dependencies=[Depends(authorize_admin)],
    summary="Create Menu Item (admin)",
)
async def create_menu_item(
    item: MenuItemCreate,
    store: BaseDocumentStore = Depends(get_store),
) -> InsertResult:
    result = await store.insert_one(Collection.MENU, item.model_dump(exclude_none=True))
    logger.info(f"Menu item {result.inserted_id} created ({item.name})")
    return InsertResult(**result.to_dict())


@router.delete(
    "/{item_id}",
    response_model=DeleteResult,
    dependencies=[Depends(authorize_admin)],
    summary="Delete Menu Item (admin)",
)
async def delete_menu_item(
    item_id: str,
    store: BaseDocumentStore = Depends(get_store),
) -> DeleteResult:
    result = await store.delete_by_id(Collection.MENU, item_id)
    logger.info(f"Delete menu item {item_id}: deleted={result.deleted_count}")
    return DeleteResult(**result.to_dict())
