"""
Document Store Abstract Base Class

Defines the interface contract for all document store implementations.
Both MemoryDocumentStore and MongoDocumentStore must implement these
methods so route handlers behave identically on either backend.

Documents are flat JSON objects keyed by an ObjectId "_id". Every document
handed back to callers has its ObjectIds rendered as hex strings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from bson import ObjectId
from bson.errors import InvalidId

from app.core.exceptions import InvalidIdentifierError


class Collection(str, Enum):
    """Collections owned by the store."""
    USERS = "users"
    MENU = "menu"
    REVIEWS = "review"
    CARTS = "carts"
    PAYMENTS = "payments"


# Field linking users, cart items and payments to the auth subject id
OWNER_FIELD = "userUid"


@dataclass
class InsertOutcome:
    """Result of a single-document insert."""
    inserted_id: str
    acknowledged: bool = True

    def to_dict(self) -> dict:
        """Render in the driver's wire shape."""
        return {"acknowledged": self.acknowledged, "insertedId": self.inserted_id}


@dataclass
class UpdateOutcome:
    """Result of a single-document update."""
    matched_count: int
    modified_count: int
    acknowledged: bool = True

    def to_dict(self) -> dict:
        return {
            "acknowledged": self.acknowledged,
            "matchedCount": self.matched_count,
            "modifiedCount": self.modified_count,
        }


@dataclass
class DeleteOutcome:
    """Result of a delete (zero when nothing matched, never an error)."""
    deleted_count: int
    acknowledged: bool = True

    def to_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "deletedCount": self.deleted_count}


def to_object_id(value: Any) -> ObjectId:
    """
    Parse a client-supplied identifier.

    Raises:
        InvalidIdentifierError: If the value is not a 24-char hex ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) would mint a fresh id instead of failing
    if not isinstance(value, str):
        raise InvalidIdentifierError(f"Invalid id: {value!r}")
    try:
        return ObjectId(value)
    except InvalidId:
        raise InvalidIdentifierError(f"Invalid id: {value!r}")


def to_object_ids(values: Iterable[Any]) -> list[ObjectId]:
    """Parse a list of identifiers, failing on the first invalid one."""
    return [to_object_id(v) for v in values]


def serialize_document(document: dict) -> dict:
    """Render top-level ObjectIds as strings for JSON responses."""
    return {
        key: str(value) if isinstance(value, ObjectId) else value
        for key, value in document.items()
    }


class BaseDocumentStore(ABC):
    """
    Abstract base class for document stores.

    Queries are flat equality filters ({"userUid": "abc"}). Implementations
    raise StoreError when the backend fails and InvalidIdentifierError for
    malformed ids.
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the store backend name (e.g. "memory", "mongodb")."""
        pass

    @abstractmethod
    async def find_many(
        self,
        collection: Collection,
        query: Optional[dict] = None,
    ) -> list[dict]:
        """Return every document matching query (all documents when None)."""
        pass

    @abstractmethod
    async def find_one(self, collection: Collection, query: dict) -> Optional[dict]:
        """Return the first document matching query, or None."""
        pass

    @abstractmethod
    async def insert_one(self, collection: Collection, document: dict) -> InsertOutcome:
        """Insert a document; any "_id" it carries is replaced."""
        pass

    @abstractmethod
    async def update_by_id(
        self,
        collection: Collection,
        document_id: str,
        fields: dict,
    ) -> UpdateOutcome:
        """Set fields on the document with the given id ($set semantics)."""
        pass

    @abstractmethod
    async def delete_by_id(self, collection: Collection, document_id: str) -> DeleteOutcome:
        """Delete the document with the given id."""
        pass

    @abstractmethod
    async def count(self, collection: Collection) -> int:
        """Count documents in a collection."""
        pass

    @abstractmethod
    async def sum_field(self, collection: Collection, field: str) -> float:
        """Sum a numeric field across a collection; non-numeric values count as 0."""
        pass

    @abstractmethod
    async def settle_payment(
        self,
        payment: dict,
        cart_item_ids: list[str],
    ) -> tuple[InsertOutcome, DeleteOutcome]:
        """
        Record a payment and delete the cart items it settled.

        Args:
            payment: Payment document to insert
            cart_item_ids: Ids of the cart items covered by the payment

        Returns:
            Insert outcome for the payment and delete outcome for the carts
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Verify connectivity to the backend."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None
