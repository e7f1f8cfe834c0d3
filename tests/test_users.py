import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.store import Collection
from tests.conftest import ADMIN_UID, OTHER_UID, USER_UID, make_settings, run


def test_create_user_starts_as_regular(client, store):
    response = client.post("/users", json={
        "email": "jane@example.com",
        "name": "Jane",
        "userUid": "uid-jane",
        "role": "admin",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["acknowledged"] is True

    user = run(store.find_one(Collection.USERS, {"email": "jane@example.com"}))
    assert user["_id"] == body["insertedId"]
    assert user["role"] == "regular"
    assert user["name"] == "Jane"


def test_create_user_is_idempotent_by_email(client, store):
    first = client.post("/users", json={"email": "jane@example.com", "userUid": "uid-jane"})
    second = client.post("/users", json={"email": "jane@example.com", "name": "Other"})

    assert "insertedId" in first.json()
    assert second.status_code == 200
    assert second.json() == {"message": "User already exists"}
    assert len(run(store.find_many(Collection.USERS, {"email": "jane@example.com"}))) == 1


def test_create_user_requires_email(client):
    response = client.post("/users", json={"name": "No Email"})

    assert response.status_code == 422


def test_list_users_returns_all_documents(client, admin_user, regular_user, auth_header):
    response = client.get("/users", headers=auth_header(ADMIN_UID))

    assert response.status_code == 200
    assert {u["_id"] for u in response.json()} == {admin_user, regular_user}


def test_check_admin_status_for_self(client, admin_user, regular_user, auth_header):
    admin = client.get(f"/users/admin/{ADMIN_UID}", headers=auth_header(ADMIN_UID))
    regular = client.get(f"/users/admin/{USER_UID}", headers=auth_header(USER_UID))

    assert admin.json() == {"admin": True}
    assert regular.json() == {"admin": False}


def test_check_admin_status_for_someone_else_is_always_false(client, admin_user, auth_header):
    response = client.get(f"/users/admin/{ADMIN_UID}", headers=auth_header(OTHER_UID))

    assert response.status_code == 200
    assert response.json() == {"admin": False}


def test_check_admin_status_for_unknown_self(client, auth_header):
    response = client.get("/users/admin/ghost", headers=auth_header("ghost"))

    assert response.json() == {"admin": False}


def test_promote_requires_admin_by_default(client, store, regular_user, auth_header):
    anonymous = client.patch(f"/users/admin/{regular_user}")
    self_promotion = client.patch(f"/users/admin/{regular_user}", headers=auth_header(USER_UID))

    assert anonymous.status_code == 401
    assert self_promotion.status_code == 403
    assert run(store.find_one(Collection.USERS, {"userUid": USER_UID}))["role"] == "regular"


def test_admin_can_promote(client, store, admin_user, regular_user, auth_header):
    response = client.patch(f"/users/admin/{regular_user}", headers=auth_header(ADMIN_UID))

    assert response.status_code == 200
    assert response.json() == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1}
    assert run(store.find_one(Collection.USERS, {"userUid": USER_UID}))["role"] == "admin"


def test_promote_unknown_user_reports_zero_matches(client, admin_user, auth_header):
    response = client.patch("/users/admin/0123456789abcdef01234567", headers=auth_header(ADMIN_UID))

    assert response.status_code == 200
    assert response.json()["matchedCount"] == 0


@pytest.fixture
def open_promotion_client(store, payment_service, tokens):
    return TestClient(create_app(
        settings=make_settings(open_admin_promotion=True),
        store=store,
        payment_service=payment_service,
        token_service=tokens,
    ))


def test_open_promotion_allows_anonymous_callers(open_promotion_client, store, regular_user):
    response = open_promotion_client.patch(f"/users/admin/{regular_user}")

    assert response.status_code == 200
    assert response.json()["modifiedCount"] == 1
    assert run(store.find_one(Collection.USERS, {"userUid": USER_UID}))["role"] == "admin"


def test_delete_user(client, store, regular_user):
    first = client.delete(f"/users/{regular_user}")
    second = client.delete(f"/users/{regular_user}")

    assert first.json() == {"acknowledged": True, "deletedCount": 1}
    assert second.json() == {"acknowledged": True, "deletedCount": 0}
    assert run(store.count(Collection.USERS)) == 0


def test_delete_user_with_invalid_id_is_400(client):
    response = client.delete("/users/not-an-object-id")

    assert response.status_code == 400
    assert response.json()["error"] is True
