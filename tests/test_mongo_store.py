from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import ConnectionFailure, OperationFailure

from app.core.exceptions import InvalidIdentifierError, StoreError
from app.main import create_app
from app.services.store import Collection
from app.services.store.mongo import MongoDocumentStore
from tests.conftest import run


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return list(self._documents if length is None else self._documents[:length])


class FakeCollection:
    """Async collection double that logs every driver call it receives."""

    def __init__(self, name, log, documents=None, rows=None, error=None):
        self.name = name
        self.log = log
        self.documents = documents or []
        self.rows = rows or []
        self.error = error

    def _record(self, *call):
        self.log.append((self.name, *call))
        if self.error is not None:
            raise self.error

    def find(self, query):
        self._record("find", query)
        return FakeCursor(self.documents)

    async def find_one(self, query):
        self._record("find_one", query)
        return self.documents[0] if self.documents else None

    async def insert_one(self, document, session=None):
        self._record("insert_one", document, session)
        return SimpleNamespace(inserted_id=ObjectId(), acknowledged=True)

    async def update_one(self, query, update):
        self._record("update_one", query, update)
        return SimpleNamespace(matched_count=1, modified_count=1, acknowledged=True)

    async def delete_one(self, query):
        self._record("delete_one", query)
        return SimpleNamespace(deleted_count=1, acknowledged=True)

    async def delete_many(self, query, session=None):
        self._record("delete_many", query, session)
        return SimpleNamespace(deleted_count=len(query["_id"]["$in"]), acknowledged=True)

    async def count_documents(self, query):
        self._record("count_documents", query)
        return len(self.documents)

    async def aggregate(self, pipeline):
        self._record("aggregate", pipeline)
        return FakeCursor(self.rows)


class FakeSession:
    def __init__(self, client):
        self.client = client

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def with_transaction(self, callback):
        self.client.transactions += 1
        return await callback(self)


class FakeAdmin:
    def __init__(self, client):
        self.client = client

    async def command(self, name):
        if self.client.down:
            raise ConnectionFailure("no servers available")
        return {"ok": 1}


class FakeDatabase:
    def __init__(self, client):
        self._client = client

    def __getitem__(self, name):
        return self._client.collection(name)


class FakeClient:
    """Stands in for AsyncMongoClient; collections are created on first use."""

    def __init__(self, error=None, down=False, **collections):
        self.log = []
        self.transactions = 0
        self.closed = False
        self.down = down
        self.admin = FakeAdmin(self)
        self._error = error
        self._collections = {
            name: FakeCollection(name, self.log, error=error, **contents)
            for name, contents in collections.items()
        }

    def __getitem__(self, db_name):
        return FakeDatabase(self)

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name, self.log, error=self._error)
        return self._collections[name]

    def start_session(self):
        return FakeSession(self)

    async def close(self):
        self.closed = True


def make_store(client, use_transactions=True):
    return MongoDocumentStore(client, "bristoBossDB", use_transactions=use_transactions)


def test_find_many_renders_object_ids_as_strings():
    oid = ObjectId()
    client = FakeClient(menu={"documents": [{"_id": oid, "name": "Soup", "price": 7.5}]})

    documents = run(make_store(client).find_many(Collection.MENU))

    assert documents == [{"_id": str(oid), "name": "Soup", "price": 7.5}]
    assert client.log == [("menu", "find", {})]


def test_driver_error_becomes_store_error():
    client = FakeClient(error=OperationFailure("not authorized"))

    with pytest.raises(StoreError) as exc:
        run(make_store(client).find_one(Collection.USERS, {"userUid": "u1"}))

    assert exc.value.status_code == 500
    assert exc.value.message == "Database operation failed: find_one"


def test_invalid_id_is_rejected_before_the_driver_is_called():
    client = FakeClient()

    with pytest.raises(InvalidIdentifierError):
        run(make_store(client).update_by_id(Collection.USERS, "not-an-id", {"role": "admin"}))

    assert client.log == []


def test_update_by_id_sets_fields_on_parsed_id():
    oid = ObjectId()
    client = FakeClient()

    outcome = run(make_store(client).update_by_id(Collection.USERS, str(oid), {"role": "admin"}))

    assert outcome.to_dict() == {"acknowledged": True, "matchedCount": 1, "modifiedCount": 1}
    assert client.log == [("users", "update_one", {"_id": oid}, {"$set": {"role": "admin"}})]


def test_sum_field_groups_over_the_whole_collection():
    client = FakeClient(payments={"rows": [{"_id": None, "total": 42.5}]})

    total = run(make_store(client).sum_field(Collection.PAYMENTS, "price"))

    assert total == 42.5
    assert client.log == [(
        "payments", "aggregate",
        [{"$group": {"_id": None, "total": {"$sum": "$price"}}}],
    )]


def test_sum_field_of_empty_collection_is_zero():
    assert run(make_store(FakeClient()).sum_field(Collection.PAYMENTS, "price")) == 0


def test_settle_payment_runs_in_one_transaction():
    cart_ids = [ObjectId(), ObjectId()]
    client = FakeClient()

    inserted, deleted = run(make_store(client).settle_payment(
        {"price": 20, "userUid": "u1"}, [str(i) for i in cart_ids],
    ))

    assert client.transactions == 1
    assert deleted.deleted_count == 2
    (_, insert_call, payment, insert_session), (_, delete_call, query, delete_session) = client.log
    assert insert_call == "insert_one" and delete_call == "delete_many"
    assert payment == {"price": 20, "userUid": "u1"}
    assert query == {"_id": {"$in": cart_ids}}
    assert insert_session is not None and insert_session is delete_session
    assert inserted.inserted_id


def test_settle_payment_without_transactions_writes_sequentially():
    client = FakeClient()

    run(make_store(client, use_transactions=False).settle_payment(
        {"price": 5}, [str(ObjectId())],
    ))

    assert client.transactions == 0
    assert [call[:2] for call in client.log] == [
        ("payments", "insert_one"),
        ("carts", "delete_many"),
    ]
    assert all(call[-1] is None for call in client.log)


def test_settle_payment_with_invalid_cart_id_writes_nothing():
    client = FakeClient()

    with pytest.raises(InvalidIdentifierError):
        run(make_store(client).settle_payment({"price": 5}, [str(ObjectId()), "bogus"]))

    assert client.log == []
    assert client.transactions == 0


def test_settle_payment_driver_error_becomes_store_error():
    client = FakeClient(error=ConnectionFailure("primary stepped down"))

    with pytest.raises(StoreError):
        run(make_store(client).settle_payment({"price": 5}, []))


def test_ping_and_close():
    healthy, down = FakeClient(), FakeClient(down=True)

    assert run(make_store(healthy).ping()) is True
    assert run(make_store(down).ping()) is False

    run(make_store(healthy).close())
    assert healthy.closed is True


def test_store_failure_reaches_client_as_structured_500(settings, payment_service, tokens):
    store = make_store(FakeClient(error=ConnectionFailure("no servers available")))
    client = TestClient(create_app(
        settings=settings,
        store=store,
        payment_service=payment_service,
        token_service=tokens,
    ))

    response = client.get("/menu")

    assert response.status_code == 500
    assert response.json() == {"error": True, "message": "Database operation failed: find"}
