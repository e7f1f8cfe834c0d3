"""
Payment Endpoints

Checkout is two calls from the frontend:
    1. POST /create-payment-intent with the cart total, which returns the
       client secret Stripe.js needs to confirm the card payment
    2. POST /payments once Stripe confirms, which records the payment and
       clears the cart items it paid for
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header

from app.api.deps import authenticate, get_payment_service, get_store
from app.core.exceptions import PaymentProcessorError
from app.core.security import SUBJECT_CLAIM
from app.schemas import (
    DeleteResult,
    InsertResult,
    PaymentCreate,
    PaymentIntentRequest,
    PaymentIntentResponse,
    PaymentRecordResponse,
)
from app.services.payment import BasePaymentService, to_minor_units
from app.services.store import OWNER_FIELD, BaseDocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


@router.post(
    "/create-payment-intent",
    response_model=PaymentIntentResponse,
    summary="Create Payment Intent",
)
async def create_payment_intent(
    body: PaymentIntentRequest,
    claims: dict[str, Any] = Depends(authenticate),
    payment_service: BasePaymentService = Depends(get_payment_service),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
) -> PaymentIntentResponse:
    """
    Create a card payment intent for the posted price.

    The price is trusted as sent. Pass an Idempotency-Key header to make
    client retries safe; the server never retries on its own.
    """
    uid = claims.get(SUBJECT_CLAIM)
    amount = to_minor_units(body.price)

    logger.info(f"Creating payment intent for uid={uid!r}: {amount} minor units")

    result = await payment_service.create_payment_intent(
        amount,
        metadata={OWNER_FIELD: str(uid)} if uid is not None else None,
        idempotency_key=idempotency_key,
    )

    if not result.success:
        logger.warning(
            f"Payment intent failed ({payment_service.provider_name}): "
            f"{result.error_code} - {result.error_message}"
        )
        raise PaymentProcessorError(result.error_message, result.error_code)

    return PaymentIntentResponse(clientSecret=result.client_secret)


@router.post(
    "/payments",
    response_model=PaymentRecordResponse,
    summary="Record Payment",
)
async def record_payment(
    payment: PaymentCreate,
    claims: dict[str, Any] = Depends(authenticate),
    store: BaseDocumentStore = Depends(get_store),
) -> PaymentRecordResponse:
    """
    Store a confirmed payment and delete the cart items it settled.

    The payment is always owned by the caller.
    """
    document = payment.model_dump(exclude_none=True)
    document[OWNER_FIELD] = claims.get(SUBJECT_CLAIM)

    inserted, deleted = await store.settle_payment(document, payment.cartItems)

    logger.info(
        f"Payment {inserted.inserted_id} recorded for uid={document[OWNER_FIELD]!r}: "
        f"price={payment.price}, cart items deleted={deleted.deleted_count}"
    )

    return PaymentRecordResponse(
        insertResult=InsertResult(**inserted.to_dict()),
        deleteResult=DeleteResult(**deleted.to_dict()),
    )
