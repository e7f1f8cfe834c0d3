"""
FastAPI Application Entry Point

Bistro Boss API - Hybrid Architecture
Runs on an in-memory store with mock payments (development) or on
MongoDB with Stripe (staging/production).

Endpoints:
    - POST /jwt: Issue a session token
    - /users, /menu, /review, /carts: Resource CRUD
    - POST /create-payment-intent, POST /payments: Checkout
    - GET /admin-stats: Admin dashboard counters
    - GET /health: System health check

Run:
    uvicorn app.main:app --port 5000
"""

import logging
from datetime import datetime
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.api.deps import get_payment_service, get_store
from app.core.config import Settings, get_settings, setup_logging
from app.core.exceptions import AppError
from app.core.security import TokenService
from app.schemas import HealthResponse
from app.services.payment import BasePaymentService, create_payment_service
from app.services.store import BaseDocumentStore, create_store

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    logger.info(f"✅ Document Store: {app.state.store.backend_name}")
    logger.info(f"✅ Payment Service: {app.state.payment_service.provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing config: {missing}")

    if settings.open_admin_promotion:
        logger.warning("⚠️ OPEN_ADMIN_PROMOTION is on: anyone can promote users to admin")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await app.state.store.close()
    logger.info("✅ Cleanup complete")


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render deliberate failures as {"error": true, "message": ...}."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.message},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    debug = request.app.state.settings.debug
    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "message": str(exc) if debug else "An unexpected error occurred",
        },
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[BaseDocumentStore] = None,
    payment_service: Optional[BasePaymentService] = None,
    token_service: Optional[TokenService] = None,
) -> FastAPI:
    """
    Build the application around its collaborators.

    Anything not passed in is built from settings (memory store and mock
    payments in development, MongoDB and Stripe otherwise).
    """
    settings = settings or get_settings()
    setup_logging(settings=settings)

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Restaurant ordering backend: users, menu, reviews, carts and "
            "payments behind bearer-token and admin-role guards."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.store = store or create_store(settings)
    app.state.payment_service = payment_service or create_payment_service(settings)
    app.state.token_service = token_service or TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # =========================================================================
    # ROOT & HEALTH ENDPOINTS
    # =========================================================================

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root."""
        return {
            "message": f"{settings.app_name} is cooking",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(
        store: BaseDocumentStore = Depends(get_store),
        payments: BasePaymentService = Depends(get_payment_service),
    ) -> HealthResponse:
        """Verify the store and payment provider are reachable."""
        store_status = "healthy" if await store.ping() else "unhealthy"
        payment_status = "healthy" if await payments.health_check() else "unhealthy"

        overall = "operational" if all(
            s == "healthy" for s in [store_status, payment_status]
        ) else "degraded"

        return HealthResponse(
            status=overall,
            store=store_status,
            payment_service=payment_status,
            timestamp=datetime.now(),
        )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("app.main:app", host=_settings.api_host, port=_settings.api_port)
