"""
In-Memory Document Store

Dict-backed implementation of the document store used in development mode
(ENV_MODE=development) and by the test suite. Nothing survives a restart.

Behavior:
    - Generates real ObjectIds so ids look exactly like MongoDB's
    - Returns deep copies, so callers never mutate stored state
    - settle_payment has no suspension point and is therefore atomic
      with respect to other requests on the event loop
"""

import copy
import logging
from typing import Optional

from bson import ObjectId

from app.services.store.base import (
    BaseDocumentStore,
    Collection,
    DeleteOutcome,
    InsertOutcome,
    UpdateOutcome,
    serialize_document,
    to_object_id,
    to_object_ids,
)

logger = logging.getLogger(__name__)


def _matches(document: dict, query: dict) -> bool:
    for key, expected in query.items():
        if key == "_id":
            expected = to_object_id(expected)
        if document.get(key) != expected:
            return False
    return True


class MemoryDocumentStore(BaseDocumentStore):
    """
    In-memory implementation of the document store.

    Example:
        >>> store = MemoryDocumentStore()
        >>> await store.insert_one(Collection.MENU, {"name": "Soup"})
        InsertOutcome(inserted_id='65f...', acknowledged=True)
    """

    def __init__(self, seed: Optional[dict[Collection, list[dict]]] = None):
        """
        Initialize the store.

        Args:
            seed: Optional documents to preload, per collection
        """
        self._collections: dict[Collection, dict[ObjectId, dict]] = {
            c: {} for c in Collection
        }

        for collection, documents in (seed or {}).items():
            for document in documents:
                self._insert(Collection(collection), document)

        logger.info("MemoryDocumentStore initialized")

    @property
    def backend_name(self) -> str:
        return "memory"

    def _insert(self, collection: Collection, document: dict) -> ObjectId:
        doc = copy.deepcopy(document)
        doc["_id"] = ObjectId()
        self._collections[collection][doc["_id"]] = doc
        return doc["_id"]

    def _delete_ids(self, collection: Collection, ids: list[ObjectId]) -> int:
        documents = self._collections[collection]
        deleted = 0
        for oid in set(ids):
            if documents.pop(oid, None) is not None:
                deleted += 1
        return deleted

    async def find_many(
        self,
        collection: Collection,
        query: Optional[dict] = None,
    ) -> list[dict]:
        return [
            serialize_document(copy.deepcopy(doc))
            for doc in self._collections[collection].values()
            if _matches(doc, query or {})
        ]

    async def find_one(self, collection: Collection, query: dict) -> Optional[dict]:
        for doc in self._collections[collection].values():
            if _matches(doc, query):
                return serialize_document(copy.deepcopy(doc))
        return None

    async def insert_one(self, collection: Collection, document: dict) -> InsertOutcome:
        oid = self._insert(collection, document)
        return InsertOutcome(inserted_id=str(oid))

    async def update_by_id(
        self,
        collection: Collection,
        document_id: str,
        fields: dict,
    ) -> UpdateOutcome:
        doc = self._collections[collection].get(to_object_id(document_id))
        if doc is None:
            return UpdateOutcome(matched_count=0, modified_count=0)

        changed = {k: v for k, v in fields.items() if doc.get(k, object()) != v}
        doc.update(copy.deepcopy(changed))
        return UpdateOutcome(matched_count=1, modified_count=1 if changed else 0)

    async def delete_by_id(self, collection: Collection, document_id: str) -> DeleteOutcome:
        deleted = self._delete_ids(collection, [to_object_id(document_id)])
        return DeleteOutcome(deleted_count=deleted)

    async def count(self, collection: Collection) -> int:
        return len(self._collections[collection])

    async def sum_field(self, collection: Collection, field: str) -> float:
        total = 0
        for doc in self._collections[collection].values():
            value = doc.get(field)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                total += value
        return total

    async def settle_payment(
        self,
        payment: dict,
        cart_item_ids: list[str],
    ) -> tuple[InsertOutcome, DeleteOutcome]:
        oids = to_object_ids(cart_item_ids)
        payment_id = self._insert(Collection.PAYMENTS, payment)
        deleted = self._delete_ids(Collection.CARTS, oids)
        return InsertOutcome(inserted_id=str(payment_id)), DeleteOutcome(deleted_count=deleted)

    async def ping(self) -> bool:
        return True
