"""Aerospike client used by the '@Aerospike' hooks and the data store steps."""

import logging
from typing import Any, Dict, Optional

import aerospike
from aerospike import exception as aerospike_exception

from ..exceptions import DBError
from ..settings import ConnectionSettings, load_connection_settings
from ..types import AerospikeKey

__all__ = ["AerospikeClient"]

logger = logging.getLogger(__name__)


class AerospikeClient:
    def __init__(self, settings: Optional[ConnectionSettings] = None):
        if settings is None:
            settings = load_connection_settings()

        self.host: str = settings.aerospike_host
        self.port: int = settings.aerospike_port
        self.client: Optional[Any] = None

    def connect(self) -> None:
        """Opens the connection to the configured seed node.

        Raises:
            DBError: If the cluster cannot be reached.
        """
        logger.debug("Connecting to Aerospike at %s:%d", self.host, self.port)
        try:
            self.client = aerospike.client({"hosts": [(self.host, self.port)]}).connect()
        except aerospike_exception.AerospikeError as e:
            self.client = None
            raise DBError(f"Unable to connect to Aerospike at {self.host}:{self.port}: {e}") from e

    def disconnect(self) -> None:
        """Closes the connection.

        Raises:
            DBError: If the client is not connected.
        """
        if self.client is None:
            raise DBError("Aerospike client is not connected.")

        self.client.close()
        self.client = None

    def is_connected(self) -> bool:
        return self.client is not None

    def _get_client(self) -> Any:
        if self.client is None:
            raise DBError("Aerospike client is not connected.")
        return self.client

    def put_record(self, key: AerospikeKey, bins: Dict[str, Any]) -> None:
        try:
            self._get_client().put(key, bins)
        except aerospike_exception.AerospikeError as e:
            raise DBError(f"Unable to write record {key!r}: {e}") from e

    def get_record(self, key: AerospikeKey) -> Dict[str, Any]:
        """Reads the bins of a record.

        Raises:
            DBError: If the record does not exist or the read fails.
        """
        try:
            _, _, bins = self._get_client().get(key)
        except aerospike_exception.RecordNotFound as e:
            raise DBError(f"Record {key!r} not found.") from e
        except aerospike_exception.AerospikeError as e:
            raise DBError(f"Unable to read record {key!r}: {e}") from e
        return bins

    def exists_record(self, key: AerospikeKey) -> bool:
        try:
            _, metadata = self._get_client().exists(key)
        except aerospike_exception.RecordNotFound:
            return False
        except aerospike_exception.AerospikeError as e:
            raise DBError(f"Unable to check record {key!r}: {e}") from e
        return metadata is not None

    def remove_record(self, key: AerospikeKey) -> None:
        try:
            self._get_client().remove(key)
        except aerospike_exception.AerospikeError as e:
            raise DBError(f"Unable to remove record {key!r}: {e}") from e
