"""MongoDB client used by the '@MongoDB' hooks and the data store steps."""

import logging
from typing import List, Optional

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..constants import MONGO_SERVER_SELECTION_TIMEOUT
from ..exceptions import DBError
from ..settings import ConnectionSettings, load_connection_settings
from ..types import Document

__all__ = ["MongoDBClient"]

logger = logging.getLogger(__name__)


class MongoDBClient:
    def __init__(self, settings: Optional[ConnectionSettings] = None):
        if settings is None:
            settings = load_connection_settings()

        self.host: str = settings.mongo_host
        self.port: int = settings.mongo_port

        self.client: Optional[MongoClient] = None
        self.database: Optional[Database] = None

    def connect(self) -> None:
        """Creates the client and checks the server answers a ping.

        Raises:
            DBError: If the server cannot be reached.
        """
        logger.debug("Connecting to MongoDB at %s:%d", self.host, self.port)
        client = MongoClient(self.host, self.port, serverSelectionTimeoutMS=MONGO_SERVER_SELECTION_TIMEOUT)
        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise DBError(f"Unable to connect to MongoDB at {self.host}:{self.port}: {e}") from e

        self.client = client

    def disconnect(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.database = None

    def is_connected(self) -> bool:
        return self.client is not None

    def _get_client(self) -> MongoClient:
        if self.client is None:
            raise DBError("MongoDB client is not connected.")
        return self.client

    def _get_database(self) -> Database:
        if self.database is None:
            raise DBError("No MongoDB database selected. Call connect_to_database() first.")
        return self.database

    def connect_to_database(self, name: str) -> None:
        self.database = self._get_client()[name]

    def exists_database(self, name: str) -> bool:
        try:
            return name in self._get_client().list_database_names()
        except PyMongoError as e:
            raise DBError(f"Unable to list MongoDB databases: {e}") from e

    def drop_database(self, name: str) -> None:
        try:
            self._get_client().drop_database(name)
        except PyMongoError as e:
            raise DBError(f"Unable to drop MongoDB database {name!r}: {e}") from e
        if self.database is not None and self.database.name == name:
            self.database = None

    def get_collections(self) -> List[str]:
        try:
            return sorted(self._get_database().list_collection_names())
        except PyMongoError as e:
            raise DBError(f"Unable to list MongoDB collections: {e}") from e

    def exists_collection(self, name: str) -> bool:
        return name in self.get_collections()

    def insert_documents(self, collection: str, documents: List[Document]) -> None:
        """Inserts documents into a collection of the selected database.

        Raises:
            DBError: If no database is selected or the insert fails.
        """
        if not documents:
            return
        try:
            self._get_database()[collection].insert_many(documents)
        except PyMongoError as e:
            raise DBError(f"MongoDB insert into {collection!r} failed: {e}") from e

    def read_documents(self, collection: str, query: Optional[Document] = None) -> List[Document]:
        """Returns the documents matching the query, without their '_id' field."""
        try:
            return list(self._get_database()[collection].find(query or {}, {"_id": False}))
        except PyMongoError as e:
            raise DBError(f"MongoDB read from {collection!r} failed: {e}") from e
