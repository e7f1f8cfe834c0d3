"""Admin dashboard statistics."""

from fastapi import APIRouter, Depends

from app.api.deps import authorize_admin, get_store
from app.schemas import AdminStatsResponse
from app.services.store import BaseDocumentStore, Collection

router = APIRouter(tags=["Admin"])


@router.get(
    "/admin-stats",
    response_model=AdminStatsResponse,
    dependencies=[Depends(authorize_admin)],
    summary="Admin Statistics",
)
async def admin_stats(store: BaseDocumentStore = Depends(get_store)) -> AdminStatsResponse:
    """Count users, menu items and orders, and total the revenue."""
    revenue = await store.sum_field(Collection.PAYMENTS, "price")

    return AdminStatsResponse(
        users=await store.count(Collection.USERS),
        products=await store.count(Collection.MENU),
        orders=await store.count(Collection.PAYMENTS),
        revenue=round(revenue, 2),
    )
