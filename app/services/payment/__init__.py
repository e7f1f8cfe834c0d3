"""
Payment Service Factory

Provides a single entry point for obtaining a payment service instance.
The factory pattern allows the rest of the application to remain agnostic
about which implementation is being used.

Usage:
    from app.services.payment import create_payment_service

    # Returns MockPaymentService or StripePaymentService based on ENV_MODE
    payment_service = create_payment_service(settings)

    result = await payment_service.create_payment_intent(2999)

Environment Switching:
    - ENV_MODE=development → MockPaymentService (no API calls)
    - ENV_MODE=staging → StripePaymentService (test keys)
    - ENV_MODE=production → StripePaymentService (live keys)
"""

import logging
from typing import Optional

from app.core.config import Settings, get_settings
from app.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
    to_minor_units,
)
from app.services.payment.mock import MockPaymentService

logger = logging.getLogger(__name__)


def create_payment_service(settings: Optional[Settings] = None) -> BasePaymentService:
    """
    Build the configured payment service.

    Created once per application and shared through app.state.

    Raises:
        ValueError: If real services are enabled but no Stripe key is configured
    """
    settings = settings or get_settings()

    if settings.is_development:
        logger.info("Payment Service: Using MockPaymentService (development mode)")
        return MockPaymentService(currency=settings.stripe_currency)

    from app.services.payment.stripe import StripePaymentService

    logger.info(
        f"Payment Service: Using StripePaymentService "
        f"({settings.env_mode.value} mode)"
    )
    return StripePaymentService(settings)


__all__ = [
    "create_payment_service",
    "to_minor_units",
    "BasePaymentService",
    "PaymentIntentResult",
    "MockPaymentService",
]
