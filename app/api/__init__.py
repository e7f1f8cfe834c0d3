"""
API Routers

Aggregates the per-resource routers into one router mounted by create_app().
"""

from fastapi import APIRouter

from app.api.routes import admin, auth, carts, menu, payments, reviews, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(menu.router)
api_router.include_router(reviews.router)
api_router.include_router(carts.router)
api_router.include_router(payments.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
