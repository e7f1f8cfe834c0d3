"""Customer reviews (read-only)."""

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.services.store import BaseDocumentStore, Collection

router = APIRouter(tags=["Reviews"])


@router.get("/review", summary="List Reviews")
async def list_reviews(store: BaseDocumentStore = Depends(get_store)) -> list[dict]:
    return await store.find_many(Collection.REVIEWS)
