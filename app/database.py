"""
Database Connection Module
Handles the MongoDB connection using PyMongo's asyncio client.
"""

import logging

from pymongo import AsyncMongoClient
from pymongo.server_api import ServerApi

from app.core.config import Settings

logger = logging.getLogger(__name__)


def create_mongo_client(settings: Settings) -> AsyncMongoClient:
    """
    Create the process-wide MongoDB client.

    The client connects lazily on first use and pools connections
    internally, so one instance serves every request.
    """
    client = AsyncMongoClient(
        settings.mongodb_uri,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        retryWrites=True,
        w="majority",
    )
    logger.info(f"MongoDB client created (database={settings.mongodb_db_name})")
    return client
