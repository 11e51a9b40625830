"""ElasticSearch client used by the '@elasticsearch' hooks and the data store steps."""

import logging
from typing import List, Optional

from elasticsearch import ApiError, Elasticsearch, TransportError

from ..exceptions import DBError
from ..settings import ConnectionSettings, load_connection_settings
from ..types import Document

__all__ = ["ElasticSearchClient"]

logger = logging.getLogger(__name__)


class ElasticSearchClient:
    def __init__(self, settings: Optional[ConnectionSettings] = None):
        if settings is None:
            settings = load_connection_settings()

        self.url: str = settings.elasticsearch_url
        self.client: Optional[Elasticsearch] = None

    def connect(self) -> None:
        """Creates the client and checks the node answers a ping.

        Raises:
            DBError: If the node does not answer.
        """
        logger.debug("Connecting to ElasticSearch at %s", self.url)
        client = Elasticsearch(hosts=[self.url])
        if not client.ping():
            client.close()
            raise DBError(f"Unable to connect to ElasticSearch at {self.url}")

        self.client = client

    def disconnect(self) -> None:
        """Closes the client.

        Raises:
            DBError: If the client is not connected.
        """
        if self.client is None:
            raise DBError("ElasticSearch client is not connected.")

        self.client.close()
        self.client = None

    def is_connected(self) -> bool:
        return self.client is not None

    def _get_client(self) -> Elasticsearch:
        if self.client is None:
            raise DBError("ElasticSearch client is not connected.")
        return self.client

    def create_index(self, index: str) -> None:
        try:
            self._get_client().indices.create(index=index)
        except (ApiError, TransportError) as e:
            raise DBError(f"Unable to create index {index!r}: {e}") from e

    def drop_index(self, index: str) -> None:
        try:
            self._get_client().indices.delete(index=index)
        except (ApiError, TransportError) as e:
            raise DBError(f"Unable to drop index {index!r}: {e}") from e

    def index_exists(self, index: str) -> bool:
        try:
            return bool(self._get_client().indices.exists(index=index))
        except (ApiError, TransportError) as e:
            raise DBError(f"Unable to check index {index!r}: {e}") from e

    def get_indexes(self) -> List[str]:
        """Lists every index name, hidden ones excluded."""
        try:
            response = self._get_client().indices.get_alias(index="*")
        except (ApiError, TransportError) as e:
            raise DBError(f"Unable to list indexes: {e}") from e
        return sorted(name for name in response.keys() if not name.startswith("."))

    def index_document(self, index: str, document: Document, document_id: Optional[str] = None) -> None:
        try:
            self._get_client().index(index=index, id=document_id, document=document, refresh=True)
        except (ApiError, TransportError) as e:
            raise DBError(f"Unable to index document into {index!r}: {e}") from e
