"""Database connection utilities for Mongo Cursor Pagination."""

from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

from ..config import Settings, get_settings


class MongoManager:
    """Manages the MongoDB client."""

    def __init__(self, settings: Optional[Settings] = None):
        self.client: Optional[AsyncMongoClient] = None
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    async def initialize(self) -> None:
        """Create the client; connections are opened lazily by the driver."""
        if self.client is None:
            self.client = AsyncMongoClient(
                self.settings.mongodb_url,
                serverSelectionTimeoutMS=self.settings.mongodb_server_selection_timeout_ms
            )

    async def close(self) -> None:
        """Close the client and its connection pool."""
        if self.client:
            await self.client.close()
            self.client = None

    async def get_database(self) -> AsyncDatabase:
        """Get the configured database."""
        if not self.client:
            await self.initialize()
        return self.client[self.settings.mongodb_database]

    async def get_collection(self, name: str) -> AsyncCollection:
        """Get a collection of the configured database."""
        database = await self.get_database()
        return database[name]

    async def ping(self) -> None:
        """Verify the server is reachable."""
        database = await self.get_database()
        await database.command("ping")


# Global database manager instance
mongo_manager = MongoManager()


async def get_collection(name: str) -> AsyncCollection:
    """Get a collection from the global manager."""
    return await mongo_manager.get_collection(name)
