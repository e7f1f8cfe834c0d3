"""
MongoDB Document Store Implementation

Production implementation using PyMongo's asyncio API.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - MONGODB_URI must point at a reachable deployment
    - Payment settlement runs in a transaction when MONGODB_USE_TRANSACTIONS
      is on, which needs a replica set or sharded cluster (Atlas qualifies)
"""

import copy
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from app.core.exceptions import StoreError
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


@contextmanager
def _store_errors(operation: str, collection: Collection) -> Iterator[None]:
    try:
        yield
    except PyMongoError as e:
        logger.error(f"MongoDB: {operation} on '{collection.value}' failed - {e}")
        raise StoreError(f"Database operation failed: {operation}") from e


class MongoDocumentStore(BaseDocumentStore):
    """
    MongoDB implementation of the document store.

    Example:
        >>> client = create_mongo_client(settings)
        >>> store = MongoDocumentStore(client, "bristoBossDB")
        >>> await store.find_many(Collection.MENU)
    """

    def __init__(
        self,
        client: AsyncMongoClient,
        db_name: str,
        use_transactions: bool = True,
    ):
        self._client = client
        self._db = client[db_name]
        self._use_transactions = use_transactions

        logger.info(
            f"MongoDocumentStore initialized "
            f"(db={db_name}, transactions={use_transactions})"
        )

    @property
    def backend_name(self) -> str:
        return "mongodb"

    def _collection(self, collection: Collection):
        return self._db[collection.value]

    async def find_many(
        self,
        collection: Collection,
        query: Optional[dict] = None,
    ) -> list[dict]:
        with _store_errors("find", collection):
            cursor = self._collection(collection).find(query or {})
            documents = await cursor.to_list(length=None)
        return [serialize_document(doc) for doc in documents]

    async def find_one(self, collection: Collection, query: dict) -> Optional[dict]:
        with _store_errors("find_one", collection):
            document = await self._collection(collection).find_one(query)
        return serialize_document(document) if document is not None else None

    async def insert_one(self, collection: Collection, document: dict) -> InsertOutcome:
        doc = copy.deepcopy(document)
        doc.pop("_id", None)
        with _store_errors("insert_one", collection):
            result = await self._collection(collection).insert_one(doc)
        return InsertOutcome(
            inserted_id=str(result.inserted_id),
            acknowledged=result.acknowledged,
        )

    async def update_by_id(
        self,
        collection: Collection,
        document_id: str,
        fields: dict,
    ) -> UpdateOutcome:
        oid = to_object_id(document_id)
        with _store_errors("update_one", collection):
            result = await self._collection(collection).update_one(
                {"_id": oid}, {"$set": fields}
            )
        return UpdateOutcome(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            acknowledged=result.acknowledged,
        )

    async def delete_by_id(self, collection: Collection, document_id: str) -> DeleteOutcome:
        oid = to_object_id(document_id)
        with _store_errors("delete_one", collection):
            result = await self._collection(collection).delete_one({"_id": oid})
        return DeleteOutcome(
            deleted_count=result.deleted_count,
            acknowledged=result.acknowledged,
        )

    async def count(self, collection: Collection) -> int:
        with _store_errors("count_documents", collection):
            return await self._collection(collection).count_documents({})

    async def sum_field(self, collection: Collection, field: str) -> float:
        pipeline = [{"$group": {"_id": None, "total": {"$sum": f"${field}"}}}]
        with _store_errors("aggregate", collection):
            cursor = await self._collection(collection).aggregate(pipeline)
            rows = await cursor.to_list(length=1)
        return rows[0]["total"] if rows else 0

    async def settle_payment(
        self,
        payment: dict,
        cart_item_ids: list[str],
    ) -> tuple[InsertOutcome, DeleteOutcome]:
        oids = to_object_ids(cart_item_ids)
        doc = copy.deepcopy(payment)
        doc.pop("_id", None)

        payments = self._collection(Collection.PAYMENTS)
        carts = self._collection(Collection.CARTS)

        async def _settle(session=None):
            inserted = await payments.insert_one(doc, session=session)
            deleted = await carts.delete_many({"_id": {"$in": oids}}, session=session)
            return inserted, deleted

        with _store_errors("settle_payment", Collection.PAYMENTS):
            if self._use_transactions:
                async with self._client.start_session() as session:
                    inserted, deleted = await session.with_transaction(_settle)
            else:
                # Sequential fallback; re-deleting settled cart ids is harmless
                inserted, deleted = await _settle()

        logger.info(
            f"MongoDB: payment {inserted.inserted_id} settled "
            f"{deleted.deleted_count}/{len(oids)} cart items"
        )

        return (
            InsertOutcome(inserted_id=str(inserted.inserted_id), acknowledged=inserted.acknowledged),
            DeleteOutcome(deleted_count=deleted.deleted_count, acknowledged=deleted.acknowledged),
        )

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error(f"MongoDB: Health check failed - {e}")
            return False

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB client closed")
