"""
Motor client lifecycle for the Study Pods database.

The client is opened once by the API lifespan (or a job's ``main``) and the
resulting ``AsyncIOMotorDatabase`` is handed to each service, which owns its
collections and indexes.

Example:
    from common.database import MongoDB

    db = MongoDB()
    await db.connect(uri=settings.MONGODB_URI, database_name=settings.MONGODB_DATABASE)
    pod_service = PodService(db.db)
    ...
    await db.disconnect()
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

logger = logging.getLogger(__name__)


def redact_uri(uri: str) -> str:
    """
    Drop the credentials part of a connection string for logging.

    Args:
        uri: MongoDB connection string, possibly with user:password@

    Returns:
        Everything after the last "@", or the URI unchanged
    """
    return uri.rsplit("@", 1)[-1]


class MongoDB:
    """Owns one motor client and the name of the database it serves."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None

    async def connect(self, uri: str, database_name: str) -> None:
        """
        Open the client and ping the server.

        Args:
            uri: MongoDB connection string
            database_name: Database handed out by ``db``

        Raises:
            pymongo.errors.PyMongoError: Server unreachable or auth rejected
        """
        logger.info(f"Connecting to MongoDB at {redact_uri(uri)} (database: {database_name})")

        client = AsyncIOMotorClient(uri, tz_aware=True)
        try:
            await client.admin.command("ping")
        except Exception as e:
            client.close()
            logger.error(f"MongoDB ping failed: {e}")
            raise

        self._client = client
        self._database_name = database_name

    async def disconnect(self) -> None:
        """Close the client; a no-op when not connected."""
        if self._client is None:
            return
        logger.info(f"Closing MongoDB client for {self._database_name}")
        self._client.close()
        self._client = None
        self._database_name = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """
        The connected database.

        Raises:
            RuntimeError: connect() has not been called
        """
        if self._client is None:
            raise RuntimeError("MongoDB is not connected. Call connect() first.")
        return self._client[self._database_name]
