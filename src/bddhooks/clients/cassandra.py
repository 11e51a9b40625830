"""Cassandra client used by the '@C*' hooks and the data store steps."""

import logging
from typing import Any, List, Optional

from cassandra import DriverException
from cassandra.cluster import Cluster, NoHostAvailable, Session

from ..exceptions import DBError
from ..settings import ConnectionSettings, load_connection_settings

__all__ = ["CassandraClient"]

logger = logging.getLogger(__name__)

DEFAULT_REPLICATION = "{'class': 'SimpleStrategy', 'replication_factor': 1}"


class CassandraClient:
    """
    Thin wrapper around a cassandra-driver Cluster and its Session.
    The cluster is created on connect() and shut down on disconnect().
    """

    def __init__(self, settings: Optional[ConnectionSettings] = None):
        if settings is None:
            settings = load_connection_settings()

        self.host: str = settings.cassandra_host
        self.port: int = settings.cassandra_port

        self.cluster: Optional[Cluster] = None
        self.session: Optional[Session] = None

    def connect(self) -> None:
        """Opens a session against the configured contact point.

        Raises:
            DBError: If no host could be reached.
        """
        logger.debug("Connecting to Cassandra at %s:%d", self.host, self.port)
        self.cluster = Cluster(contact_points=[self.host], port=self.port)
        try:
            self.session = self.cluster.connect()
        except NoHostAvailable as e:
            self.cluster.shutdown()
            self.cluster = None
            raise DBError(f"Unable to connect to Cassandra at {self.host}:{self.port}: {e}") from e

    def disconnect(self) -> None:
        """Shuts down the session and the cluster.

        Raises:
            DBError: If the client is not connected.
        """
        if self.session is None or self.cluster is None:
            raise DBError("Cassandra client is not connected.")

        self.session.shutdown()
        self.cluster.shutdown()
        self.session = None
        self.cluster = None

    def is_connected(self) -> bool:
        return self.session is not None

    def _get_session(self) -> Session:
        if self.session is None:
            raise DBError("Cassandra client is not connected.")
        return self.session

    def execute(self, query: str, parameters: Optional[Any] = None) -> Any:
        """Executes a CQL statement and returns the driver's result set.

        Raises:
            DBError: If not connected or the driver rejects the statement.
        """
        session = self._get_session()
        try:
            return session.execute(query, parameters)
        except DriverException as e:
            raise DBError(f"Cassandra query failed: {e}") from e

    def create_keyspace(self, keyspace: str, replication: str = DEFAULT_REPLICATION) -> None:
        self.execute(f"CREATE KEYSPACE IF NOT EXISTS {keyspace} WITH replication = {replication}")

    def drop_keyspace(self, keyspace: str) -> None:
        self.execute(f"DROP KEYSPACE IF EXISTS {keyspace}")

    def use_keyspace(self, keyspace: str) -> None:
        session = self._get_session()
        try:
            session.set_keyspace(keyspace)
        except DriverException as e:
            raise DBError(f"Unable to use keyspace {keyspace!r}: {e}") from e

    def get_keyspaces(self) -> List[str]:
        """Lists the keyspace names known to the cluster metadata."""
        if self.cluster is None:
            raise DBError("Cassandra client is not connected.")
        return sorted(self.cluster.metadata.keyspaces)

    def exists_keyspace(self, keyspace: str) -> bool:
        return keyspace in self.get_keyspaces()

    def get_tables(self, keyspace: str) -> List[str]:
        """Lists the table names of a keyspace.

        Raises:
            DBError: If the keyspace does not exist.
        """
        if self.cluster is None:
            raise DBError("Cassandra client is not connected.")

        keyspace_metadata = self.cluster.metadata.keyspaces.get(keyspace)
        if keyspace_metadata is None:
            raise DBError(f"Keyspace {keyspace!r} does not exist.")
        return sorted(keyspace_metadata.tables)

    def exists_table(self, keyspace: str, table: str) -> bool:
        return table in self.get_tables(keyspace)
