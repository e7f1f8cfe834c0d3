"""
Document Store Factory

Provides a single entry point for building the document store. The rest
of the application only sees BaseDocumentStore.

Usage:
    from app.services.store import create_store

    # Returns MemoryDocumentStore or MongoDocumentStore based on ENV_MODE
    store = create_store(settings)
    items = await store.find_many(Collection.MENU)

Environment Switching:
    - ENV_MODE=development → MemoryDocumentStore (no database needed)
    - ENV_MODE=staging → MongoDocumentStore
    - ENV_MODE=production → MongoDocumentStore
"""

import logging
from typing import Optional

from app.core.config import Settings, get_settings
from app.services.store.base import (
    OWNER_FIELD,
    BaseDocumentStore,
    Collection,
    DeleteOutcome,
    InsertOutcome,
    UpdateOutcome,
)
from app.services.store.memory import MemoryDocumentStore

logger = logging.getLogger(__name__)


def create_store(settings: Optional[Settings] = None) -> BaseDocumentStore:
    """
    Build the configured document store.

    The store is created once per application and shared by every request
    through app.state.

    Returns:
        BaseDocumentStore: Memory store in development, MongoDB otherwise
    """
    settings = settings or get_settings()

    if settings.is_development:
        logger.info("Document Store: Using MemoryDocumentStore (development mode)")
        return MemoryDocumentStore()

    from app.database import create_mongo_client
    from app.services.store.mongo import MongoDocumentStore

    logger.info(
        f"Document Store: Using MongoDocumentStore "
        f"({settings.env_mode.value} mode)"
    )
    return MongoDocumentStore(
        create_mongo_client(settings),
        settings.mongodb_db_name,
        use_transactions=settings.mongodb_use_transactions,
    )


__all__ = [
    "create_store",
    "BaseDocumentStore",
    "Collection",
    "OWNER_FIELD",
    "InsertOutcome",
    "UpdateOutcome",
    "DeleteOutcome",
    "MemoryDocumentStore",
]
