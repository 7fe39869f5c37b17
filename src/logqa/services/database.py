"""
Database Service

Handles all MongoDB access for the device_logs collection.
A client is opened per call and closed when the call finishes, so no
connection outlives a single retrieval.
"""

import os
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..config_loader import config
from ..exceptions import StorageError

logger = logging.getLogger(__name__)


class DatabaseService:
    """
    MongoDB service for log records.

    All reads go through the collection() context manager, which turns
    driver errors into StorageError and always releases the client.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database: Optional[str] = None,
        collection: Optional[str] = None,
        client_factory: Callable[..., MongoClient] = MongoClient
    ):
        """
        Initialize database service.

        Args:
            uri: MongoDB connection string. Defaults to $MONGO_URI.
            database: Database name. Defaults to config.
            collection: Collection name. Defaults to config.
            client_factory: Callable that builds a MongoClient
        """
        mongo_config = config.get_section('mongo')

        uri_env = mongo_config.get('uri_env', 'MONGO_URI')
        self.uri = uri or os.getenv(uri_env) or mongo_config.get('default_uri', 'mongodb://localhost:27017')
        self.database_name = database or mongo_config.get('database', 'logs')
        self.collection_name = collection or mongo_config.get('collection', 'device_logs')

        self.server_selection_timeout_ms = mongo_config.get('server_selection_timeout_ms', 5000)
        self.socket_timeout_ms = mongo_config.get('socket_timeout_ms', 30000)

        self._client_factory = client_factory

        logger.info(f"Database service initialized: {self.database_name}.{self.collection_name}")

    @contextmanager
    def collection(self) -> Iterator[Collection]:
        """
        Open a client and yield the log collection.

        Raises:
            StorageError: If MongoDB is unreachable or rejects the operation
        """
        client = None
        try:
            client = self._client_factory(
                self.uri,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                socketTimeoutMS=self.socket_timeout_ms,
            )
            yield client[self.database_name][self.collection_name]
        except PyMongoError as e:
            logger.error(f"MongoDB operation failed: {e}", exc_info=True)
            raise StorageError(f"MongoDB operation failed: {e}") from e
        finally:
            if client is not None:
                client.close()

    def find(
        self,
        filters: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]] = None,
        limit: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Filtered find.

        Args:
            filters: MongoDB filter document
            projection: Optional projection document
            limit: Maximum documents to return (0 = no limit)

        Returns:
            Matching documents
        """
        with self.collection() as collection:
            cursor = collection.find(dict(filters), projection=projection)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

    def aggregate(self, pipeline: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Run an aggregation pipeline and materialize the results."""
        with self.collection() as collection:
            return list(collection.aggregate(list(pipeline)))

    def health_check(self) -> bool:
        """
        Verify MongoDB is reachable.

        Returns:
            True if healthy, False otherwise
        """
        try:
            with self.collection() as collection:
                collection.database.client.admin.command('ping')
            logger.info("Database health check passed")
            return True
        except StorageError as e:
            logger.error(f"Database health check failed: {e}")
            return False
