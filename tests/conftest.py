import asyncio

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.security import TokenService
from app.main import create_app
from app.services.payment import MockPaymentService
from app.services.store import Collection, MemoryDocumentStore

TEST_SECRET = "test-signing-secret-that-is-long-enough-for-hs256"

ADMIN_UID = "uid-admin"
USER_UID = "uid-user"
OTHER_UID = "uid-other"

SEED_REVIEWS = [
    {"name": "Jane", "details": "Best soup in town", "rating": 5},
    {"name": "Tom", "details": "Slow delivery", "rating": 3},
]


def run(coro):
    """Drive a store/payment coroutine from a synchronous test."""
    return asyncio.run(coro)


def make_settings(**overrides) -> Settings:
    values = {"env_mode": "development", "jwt_secret": TEST_SECRET}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return MemoryDocumentStore(seed={Collection.REVIEWS: SEED_REVIEWS})


@pytest.fixture
def payment_service():
    return MockPaymentService(failure_rate=0.0, min_latency=0, max_latency=0)


@pytest.fixture
def tokens():
    return TokenService(secret=TEST_SECRET)


@pytest.fixture
def app(settings, store, payment_service, tokens):
    return create_app(
        settings=settings,
        store=store,
        payment_service=payment_service,
        token_service=tokens,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_header(tokens):
    def _auth_header(uid: str) -> dict:
        return {"Authorization": f"Bearer {tokens.issue({'uid': uid})}"}
    return _auth_header


@pytest.fixture
def admin_user(store):
    """Admin user document stored directly, returns its id."""
    result = run(store.insert_one(
        Collection.USERS,
        {"email": "admin@bistro.com", "userUid": ADMIN_UID, "role": "admin"},
    ))
    return result.inserted_id


@pytest.fixture
def regular_user(store):
    result = run(store.insert_one(
        Collection.USERS,
        {"email": "user@bistro.com", "userUid": USER_UID, "role": "regular"},
    ))
    return result.inserted_id
