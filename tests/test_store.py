import pytest

from app.core.exceptions import InvalidIdentifierError
from app.services.store import Collection, MemoryDocumentStore
from app.services.store.base import serialize_document, to_object_id
from tests.conftest import run


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


def test_insert_replaces_client_supplied_id(memory_store):
    result = run(memory_store.insert_one(Collection.MENU, {"_id": "mine", "name": "Soup"}))

    [doc] = run(memory_store.find_many(Collection.MENU))
    assert doc["_id"] == result.inserted_id != "mine"


def test_returned_documents_are_copies(memory_store):
    run(memory_store.insert_one(Collection.MENU, {"name": "Soup", "tags": ["hot"]}))

    doc = run(memory_store.find_one(Collection.MENU, {"name": "Soup"}))
    doc["tags"].append("mutated")

    assert run(memory_store.find_one(Collection.MENU, {"name": "Soup"}))["tags"] == ["hot"]


def test_find_filters_on_every_query_field(memory_store):
    run(memory_store.insert_one(Collection.CARTS, {"userUid": "a", "name": "Soup"}))
    run(memory_store.insert_one(Collection.CARTS, {"userUid": "a", "name": "Salad"}))
    run(memory_store.insert_one(Collection.CARTS, {"userUid": "b", "name": "Soup"}))

    assert len(run(memory_store.find_many(Collection.CARTS, {"userUid": "a"}))) == 2
    assert len(run(memory_store.find_many(Collection.CARTS, {"userUid": "a", "name": "Soup"}))) == 1
    assert run(memory_store.find_one(Collection.CARTS, {"userUid": "c"})) is None


def test_find_by_id(memory_store):
    inserted = run(memory_store.insert_one(Collection.USERS, {"email": "a@x.com"}))

    doc = run(memory_store.find_one(Collection.USERS, {"_id": inserted.inserted_id}))

    assert doc["email"] == "a@x.com"


def test_update_reports_matched_and_modified(memory_store):
    user_id = run(memory_store.insert_one(Collection.USERS, {"role": "regular"})).inserted_id

    first = run(memory_store.update_by_id(Collection.USERS, user_id, {"role": "admin"}))
    again = run(memory_store.update_by_id(Collection.USERS, user_id, {"role": "admin"}))

    assert (first.matched_count, first.modified_count) == (1, 1)
    assert (again.matched_count, again.modified_count) == (1, 0)


def test_sum_field_ignores_missing_and_non_numeric_values(memory_store):
    for price in (10, 2.5, "12", None, True):
        run(memory_store.insert_one(Collection.PAYMENTS, {"price": price}))
    run(memory_store.insert_one(Collection.PAYMENTS, {}))

    assert run(memory_store.sum_field(Collection.PAYMENTS, "price")) == 12.5
    assert run(memory_store.count(Collection.PAYMENTS)) == 6


def test_settle_payment_counts_duplicate_ids_once(memory_store):
    item = run(memory_store.insert_one(Collection.CARTS, {"name": "Soup"})).inserted_id

    _, deleted = run(memory_store.settle_payment({"price": 1}, [item, item]))

    assert deleted.deleted_count == 1


def test_outcomes_render_driver_wire_shape(memory_store):
    inserted = run(memory_store.insert_one(Collection.MENU, {}))
    deleted = run(memory_store.delete_by_id(Collection.MENU, inserted.inserted_id))

    assert inserted.to_dict() == {"acknowledged": True, "insertedId": inserted.inserted_id}
    assert deleted.to_dict() == {"acknowledged": True, "deletedCount": 1}


@pytest.mark.parametrize("value", ["", "xyz", "0123456789abcdef0123456", None, 42])
def test_invalid_identifiers_are_rejected(value):
    with pytest.raises(InvalidIdentifierError):
        to_object_id(value)


def test_serialize_document_stringifies_object_ids():
    oid = to_object_id("0123456789abcdef01234567")

    assert serialize_document({"_id": oid, "name": "Soup"}) == {
        "_id": "0123456789abcdef01234567",
        "name": "Soup",
    }
