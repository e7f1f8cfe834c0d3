"""
Payment Service Abstract Base Class

Defines the interface contract for all payment service implementations.
Both MockPaymentService and StripePaymentService must implement these methods,
ensuring consistent behavior regardless of which service is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between payment providers
    - Facilitates testing with mock implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


def to_minor_units(price: float) -> int:
    """
    Convert a price in major units to minor units (dollars to cents).

    No bounds checking: negative or absurd prices are passed through and
    left for the processor to reject.
    """
    return int(round(price * 100))


@dataclass
class PaymentIntentResult:
    """
    Standardized result from creating a payment intent.

    Attributes:
        success: Whether the processor accepted the request
        payment_intent_id: Processor identifier (Stripe format: pi_xxx)
        client_secret: Secret the frontend uses to confirm the payment
        amount: Amount in minor units (cents)
        currency: Currency code (e.g., "usd")
        status: Processor-side status of the intent
        error_message: Error description if the request failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the processor call
    """
    success: bool
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    amount: Optional[int] = None
    currency: str = "usd"
    status: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "payment_intent_id": self.payment_intent_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "response_time_ms": self.response_time_ms,
        }


class BasePaymentService(ABC):
    """
    Abstract base class for payment services.

    Example:
        >>> service = create_payment_service()  # Returns Mock or Stripe
        >>> result = await service.create_payment_intent(2999)
        >>> if result.success:
        ...     print(result.client_secret)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "mock", "stripe")
        """
        pass

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: Optional[str] = None,
        metadata: Optional[dict] = None,
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntentResult:
        """
        Create a payment intent for client-side confirmation.

        Args:
            amount: Amount in minor units (cents)
            currency: Currency code (provider default when None)
            metadata: Additional key-value data to attach
            idempotency_key: Forwarded to the processor so a client retry
                does not create a second intent

        Returns:
            PaymentIntentResult: Contains client_secret for the frontend
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment service.

        Returns:
            bool: True if service is reachable and operational
        """
        pass
