"""State shared by the hooks and the step definitions of a run."""

import logging
import threading
from typing import List, Optional

from selenium.webdriver.remote.webdriver import WebDriver

from .clients.aerospike import AerospikeClient
from .clients.cassandra import CassandraClient
from .clients.elasticsearch import ElasticSearchClient
from .clients.mongodb import MongoDBClient
from .settings import ConnectionSettings, load_connection_settings
from .utils import ExceptionList

__all__ = ["CommonSpec"]


class _SharedClients:
    """Holds one client per data store for the whole process."""

    _lock = threading.Lock()
    cassandra: Optional[CassandraClient] = None
    mongodb: Optional[MongoDBClient] = None
    elasticsearch: Optional[ElasticSearchClient] = None
    aerospike: Optional[AerospikeClient] = None

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls.cassandra = None
            cls.mongodb = None
            cls.elasticsearch = None
            cls.aerospike = None


class CommonSpec:
    """
    Shared state of a run: the logger, the exception list, the data store
    clients, and the browser session opened by the '@web' hook.
    """

    def __init__(self, settings: Optional[ConnectionSettings] = None):
        self.logger = logging.getLogger("bddhooks.hooks")
        self._settings = settings

        self.browser_name: str = ""
        self.driver: Optional[WebDriver] = None

    @property
    def settings(self) -> ConnectionSettings:
        # Resolved late so that settings exported by the CLI are taken into account.
        if self._settings is None:
            self._settings = load_connection_settings()
        return self._settings

    @property
    def exceptions(self) -> List[Exception]:
        return ExceptionList.get_instance().exceptions

    def get_cassandra_client(self) -> CassandraClient:
        with _SharedClients._lock:
            if _SharedClients.cassandra is None:
                _SharedClients.cassandra = CassandraClient(self.settings)
            return _SharedClients.cassandra

    def get_mongodb_client(self) -> MongoDBClient:
        with _SharedClients._lock:
            if _SharedClients.mongodb is None:
                _SharedClients.mongodb = MongoDBClient(self.settings)
            return _SharedClients.mongodb

    def get_elasticsearch_client(self) -> ElasticSearchClient:
        with _SharedClients._lock:
            if _SharedClients.elasticsearch is None:
                _SharedClients.elasticsearch = ElasticSearchClient(self.settings)
            return _SharedClients.elasticsearch

    def get_aerospike_client(self) -> AerospikeClient:
        with _SharedClients._lock:
            if _SharedClients.aerospike is None:
                _SharedClients.aerospike = AerospikeClient(self.settings)
            return _SharedClients.aerospike

    @staticmethod
    def reset_clients() -> None:
        """Forgets the shared clients; the next getter call creates new ones."""
        _SharedClients.reset()
