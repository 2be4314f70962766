"""MongoDB connection management."""

from .connection import MongoManager, mongo_manager, get_collection

__all__ = ["MongoManager", "mongo_manager", "get_collection"]
