import threading
from types import SimpleNamespace

import pytest
import stripe

from app.services.payment.stripe import StripePaymentService
from tests.conftest import make_settings, run


@pytest.fixture
def service():
    return StripePaymentService(make_settings(stripe_secret_key="sk_test_123"))


def test_requires_secret_key():
    with pytest.raises(ValueError):
        StripePaymentService(make_settings(stripe_secret_key=None))


def test_intent_is_created_off_the_event_loop_thread(service, monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append((threading.get_ident(), kwargs))
        return SimpleNamespace(
            id="pi_1", client_secret="pi_1_secret_x",
            amount=kwargs["amount"], currency=kwargs["currency"], status="requires_payment_method",
        )

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

    result = run(service.create_payment_intent(2999, metadata={"userUid": "u1"}, idempotency_key="k-1"))

    assert result.success is True
    assert result.client_secret == "pi_1_secret_x"
    (thread_id, kwargs), = calls
    assert thread_id != threading.get_ident()
    assert kwargs == {
        "amount": 2999,
        "currency": "usd",
        "payment_method_types": ["card"],
        "metadata": {"userUid": "u1"},
        "idempotency_key": "k-1",
    }


def test_invalid_request_is_reported_not_raised(service, monkeypatch):
    def fake_create(**kwargs):
        raise stripe.InvalidRequestError("Amount must be at least 50 cents", "amount")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

    result = run(service.create_payment_intent(0))

    assert result.success is False
    assert result.error_code == "invalid_request"


def test_health_check_reports_connection_failure(service, monkeypatch):
    def fake_retrieve():
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.Account, "retrieve", fake_retrieve)

    assert run(service.health_check()) is False
