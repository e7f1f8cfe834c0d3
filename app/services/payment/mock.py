"""
Mock Payment Service Implementation

Simulates Stripe-like payment intents without making real API calls.
Used in development mode (ENV_MODE=development) and by the test suite to:
    - Exercise the checkout flow locally
    - Develop without internet connectivity or Stripe keys

Behavior:
    - Simulates configurable response times
    - Randomly fails a configurable share of requests
    - Rejects non-positive amounts, as Stripe does
    - Generates Stripe-like IDs (pi_xxx) and client secrets
    - Replays the same intent for a repeated idempotency key
"""

import asyncio
import random
import uuid
import logging
from typing import Optional

from app.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
)

logger = logging.getLogger(__name__)


class MockPaymentService(BasePaymentService):
    """
    Mock implementation of the payment service.

    Attributes:
        failure_rate: Probability of simulated processor failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
        currency: Default currency code

    Example:
        >>> service = MockPaymentService(failure_rate=0.0)
        >>> result = await service.create_payment_intent(2999)
        >>> result.client_secret
        'pi_mock_..._secret_mock'
    """

    # Simulated failure reasons (mimics real Stripe error codes)
    FAILURE_REASONS = [
        ("api_connection_error", "Payment service temporarily unavailable."),
        ("rate_limit", "Too many requests made to the API too quickly."),
        ("processing_error", "An error occurred while processing the request."),
    ]

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.05,
        max_latency: float = 0.2,
        currency: str = "usd",
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self.currency = currency
        self._intents_by_key: dict[str, PaymentIntentResult] = {}

        logger.info(
            f"MockPaymentService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def _generate_payment_intent_id(self) -> str:
        """Generate a Stripe-like payment intent ID."""
        return f"pi_mock_{uuid.uuid4().hex[:24]}"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    async def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        metadata: Optional[dict] = None,
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntentResult:
        """
        Simulate creating a payment intent.

        The returned client_secret won't work with Stripe.js.
        """
        if idempotency_key and idempotency_key in self._intents_by_key:
            logger.debug(f"Mock: Replaying intent for idempotency key {idempotency_key}")
            return self._intents_by_key[idempotency_key]

        currency = currency or self.currency
        latency_ms = await self._simulate_latency()

        if amount <= 0:
            return PaymentIntentResult(
                success=False,
                amount=amount,
                currency=currency,
                error_message="Amount must be greater than 0",
                error_code="invalid_amount",
                response_time_ms=latency_ms,
            )

        if self._should_fail():
            error_code, error_message = random.choice(self.FAILURE_REASONS)
            logger.debug(f"Mock: Payment intent failed - {error_code}")
            return PaymentIntentResult(
                success=False,
                amount=amount,
                currency=currency,
                error_message=error_message,
                error_code=error_code,
                response_time_ms=latency_ms,
            )

        payment_intent_id = self._generate_payment_intent_id()
        result = PaymentIntentResult(
            success=True,
            payment_intent_id=payment_intent_id,
            client_secret=f"{payment_intent_id}_secret_mock",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
            response_time_ms=latency_ms,
        )

        if idempotency_key:
            self._intents_by_key[idempotency_key] = result

        logger.info(f"Mock: Created payment intent {payment_intent_id} - {amount} {currency}")
        return result

    async def health_check(self) -> bool:
        """
        Mock health check always returns True.
        """
        logger.debug("Mock: Health check passed")
        return True
