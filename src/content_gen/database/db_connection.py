"""
MongoDB connection management.

One DatabaseConnection is created per script run from explicit Settings;
there is no module-level client.
"""
from typing import Optional
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from ..config import Settings
from ..exceptions import DatabaseError

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """Owns the MongoClient for one script run"""

    def __init__(self, settings: Settings, client: Optional[MongoClient] = None):
        self.settings = settings
        self._client: Optional[MongoClient] = client
        self._db: Optional[Database] = None
        self._initialize_connection()

    def _initialize_connection(self):
        """Initialize MongoDB connection"""
        mongodb_uri = self.settings.require_mongodb()
        try:
            if self._client is None:
                self._client = MongoClient(mongodb_uri)
            self._db = self._client[self.settings.mongodb_db_name]
            logger.info(f"Connected to MongoDB database: {self.settings.mongodb_db_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            raise DatabaseError(f"MongoDB connection failed: {str(e)}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client instance"""
        return self._client

    @property
    def db(self) -> Database:
        """Get database instance"""
        return self._db

    def get_collection(self, collection_name: Optional[str] = None) -> Collection:
        """Get a collection, the articles collection by default"""
        return self._db[collection_name or self.settings.articles_collection]

    def ping(self) -> bool:
        """Check that the server answers"""
        try:
            self._client.admin.command('ping')
            logger.info("Successfully connected to MongoDB")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            return False

    def close(self):
        """Close MongoDB connection"""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("MongoDB connection closed")
