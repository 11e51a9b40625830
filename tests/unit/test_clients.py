from unittest.mock import MagicMock

import pytest
from aerospike import exception as aerospike_exception
from cassandra import InvalidRequest
from cassandra.cluster import NoHostAvailable
from elasticsearch import TransportError
from pymongo.errors import ServerSelectionTimeoutError
from pytest_mock import MockerFixture

from src.bddhooks.clients.aerospike import AerospikeClient
from src.bddhooks.clients.cassandra import CassandraClient
from src.bddhooks.clients.elasticsearch import ElasticSearchClient
from src.bddhooks.clients.mongodb import MongoDBClient
from src.bddhooks.exceptions import DBError
from src.bddhooks.settings import ConnectionSettings, load_connection_settings


class TestCassandraClient:
    @pytest.fixture
    def cluster_class(self, mocker: MockerFixture) -> MagicMock:
        return mocker.patch("src.bddhooks.clients.cassandra.Cluster")

    def test_connect_uses_configured_contact_point(self, cluster_class: MagicMock):
        settings = load_connection_settings({"CASSANDRA_HOST": "cassandra.local", "CASSANDRA_PORT": "9142"})
        client = CassandraClient(settings)

        client.connect()

        cluster_class.assert_called_once_with(contact_points=["cassandra.local"], port=9142)
        assert client.session is cluster_class.return_value.connect.return_value
        assert client.is_connected()

    def test_connect_without_hosts_raises(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        cluster_class.return_value.connect.side_effect = NoHostAvailable("Unable to connect", {})
        client = CassandraClient(default_settings)

        with pytest.raises(DBError, match="Unable to connect to Cassandra at 127.0.0.1:9042"):
            client.connect()

        cluster_class.return_value.shutdown.assert_called_once_with()
        assert not client.is_connected()

    def test_disconnect_shuts_down(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        client = CassandraClient(default_settings)
        client.connect()
        session = client.session

        client.disconnect()

        session.shutdown.assert_called_once_with()
        cluster_class.return_value.shutdown.assert_called_once_with()
        assert not client.is_connected()

    def test_disconnect_when_not_connected_raises(self, default_settings: ConnectionSettings):
        with pytest.raises(DBError, match="not connected"):
            CassandraClient(default_settings).disconnect()

    def test_execute_wraps_driver_errors(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        client = CassandraClient(default_settings)
        client.connect()
        client.session.execute.side_effect = InvalidRequest("bad query")

        with pytest.raises(DBError, match="bad query"):
            client.execute("SELECT * FROM nowhere")

    def test_keyspace_operations(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        client = CassandraClient(default_settings)
        client.connect()

        client.create_keyspace("ks")
        client.drop_keyspace("ks")

        statements = [args[0] for args, _ in client.session.execute.call_args_list]
        assert statements[0].startswith("CREATE KEYSPACE IF NOT EXISTS ks WITH replication = ")
        assert statements[1] == "DROP KEYSPACE IF EXISTS ks"

    def test_metadata_lookups(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        keyspace_metadata = MagicMock(tables={"users": object(), "orders": object()})
        cluster_class.return_value.metadata.keyspaces = {"system": MagicMock(tables={}), "ks": keyspace_metadata}
        client = CassandraClient(default_settings)
        client.connect()

        assert client.get_keyspaces() == ["ks", "system"]
        assert client.exists_keyspace("ks")
        assert not client.exists_keyspace("missing")
        assert client.get_tables("ks") == ["orders", "users"]
        assert client.exists_table("ks", "users")

        with pytest.raises(DBError, match="does not exist"):
            client.get_tables("missing")

    def test_use_keyspace_wraps_driver_errors(self, cluster_class: MagicMock, default_settings: ConnectionSettings):
        client = CassandraClient(default_settings)
        client.connect()
        client.session.set_keyspace.side_effect = InvalidRequest("Keyspace 'missing' does not exist")

        with pytest.raises(DBError, match="Unable to use keyspace 'missing'"):
            client.use_keyspace("missing")


class TestMongoDBClient:
    @pytest.fixture
    def mongo_class(self, mocker: MockerFixture) -> MagicMock:
        return mocker.patch("src.bddhooks.clients.mongodb.MongoClient")

    def test_connect_pings_server(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        client = MongoDBClient(default_settings)

        client.connect()

        mongo_class.assert_called_once_with("127.0.0.1", 27017, serverSelectionTimeoutMS=5000)
        mongo_class.return_value.admin.command.assert_called_once_with("ping")
        assert client.is_connected()

    def test_connect_failure_raises_db_error(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        mongo_class.return_value.admin.command.side_effect = ServerSelectionTimeoutError("timed out")
        client = MongoDBClient(default_settings)

        with pytest.raises(DBError, match="Unable to connect to MongoDB"):
            client.connect()

        mongo_class.return_value.close.assert_called_once_with()
        assert not client.is_connected()

    def test_disconnect_closes_client(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        client = MongoDBClient(default_settings)
        client.connect()

        client.disconnect()
        client.disconnect()

        mongo_class.return_value.close.assert_called_once_with()
        assert not client.is_connected()

    def test_database_operations(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        mongo = mongo_class.return_value
        database = MagicMock()
        database.name = "db"
        database.list_collection_names.return_value = ["users"]
        mongo.__getitem__.return_value = database
        mongo.list_database_names.return_value = ["admin", "db"]

        client = MongoDBClient(default_settings)
        client.connect()
        client.connect_to_database("db")

        assert client.exists_database("db")
        assert client.exists_collection("users")

        client.insert_documents("users", [{"name": "alice"}])
        database.__getitem__.return_value.insert_many.assert_called_once_with([{"name": "alice"}])

        client.drop_database("db")
        mongo.drop_database.assert_called_once_with("db")
        assert client.database is None, "Dropping the selected database should unselect it."

    def test_operations_require_a_database(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        client = MongoDBClient(default_settings)
        client.connect()

        with pytest.raises(DBError, match="No MongoDB database selected"):
            client.read_documents("users")

    def test_operations_require_a_connection(self, default_settings: ConnectionSettings):
        with pytest.raises(DBError, match="not connected"):
            MongoDBClient(default_settings).exists_database("db")

    def test_server_errors_are_wrapped(self, mongo_class: MagicMock, default_settings: ConnectionSettings):
        mongo = mongo_class.return_value
        database = mongo.__getitem__.return_value
        error = ServerSelectionTimeoutError("timed out")
        mongo.list_database_names.side_effect = error
        database.list_collection_names.side_effect = error
        database.__getitem__.return_value.find.side_effect = error

        client = MongoDBClient(default_settings)
        client.connect()
        client.connect_to_database("db")

        with pytest.raises(DBError, match="Unable to list MongoDB databases"):
            client.exists_database("db")
        with pytest.raises(DBError, match="Unable to list MongoDB collections"):
            client.get_collections()
        with pytest.raises(DBError, match="MongoDB read from 'users' failed"):
            client.read_documents("users")


class TestElasticSearchClient:
    @pytest.fixture
    def es_class(self, mocker: MockerFixture) -> MagicMock:
        return mocker.patch("src.bddhooks.clients.elasticsearch.Elasticsearch")

    def test_connect_pings_node(self, es_class: MagicMock):
        settings = load_connection_settings({"ES_NODE": "es.local", "ES_PORT": "9201"})
        client = ElasticSearchClient(settings)

        client.connect()

        es_class.assert_called_once_with(hosts=["http://es.local:9201"])
        assert client.is_connected()

    def test_connect_failure_raises(self, es_class: MagicMock, default_settings: ConnectionSettings):
        es_class.return_value.ping.return_value = False

        with pytest.raises(DBError, match="Unable to connect to ElasticSearch"):
            ElasticSearchClient(default_settings).connect()

        es_class.return_value.close.assert_called_once_with()

    def test_disconnect(self, es_class: MagicMock, default_settings: ConnectionSettings):
        client = ElasticSearchClient(default_settings)
        client.connect()

        client.disconnect()

        es_class.return_value.close.assert_called_once_with()
        with pytest.raises(DBError, match="not connected"):
            client.disconnect()

    def test_index_operations(self, es_class: MagicMock, default_settings: ConnectionSettings):
        indices = es_class.return_value.indices
        indices.get_alias.return_value = {"logs": {}, ".security": {}, "metrics": {}}
        client = ElasticSearchClient(default_settings)
        client.connect()

        client.create_index("logs")
        indices.create.assert_called_once_with(index="logs")

        assert client.get_indexes() == ["logs", "metrics"], "Hidden indexes should not be listed."
        assert client.index_exists("logs")

        indices.delete.side_effect = TransportError("node down")
        with pytest.raises(DBError, match="Unable to drop index 'logs'"):
            client.drop_index("logs")

    def test_lookup_errors_are_wrapped(self, es_class: MagicMock, default_settings: ConnectionSettings):
        indices = es_class.return_value.indices
        indices.exists.side_effect = TransportError("node down")
        indices.get_alias.side_effect = TransportError("node down")
        client = ElasticSearchClient(default_settings)
        client.connect()

        with pytest.raises(DBError, match="Unable to check index 'logs'"):
            client.index_exists("logs")
        with pytest.raises(DBError, match="Unable to list indexes"):
            client.get_indexes()


class TestAerospikeClient:
    @pytest.fixture
    def aerospike_factory(self, mocker: MockerFixture) -> MagicMock:
        return mocker.patch("src.bddhooks.clients.aerospike.aerospike.client")

    @pytest.fixture
    def connection(self, aerospike_factory: MagicMock) -> MagicMock:
        return aerospike_factory.return_value.connect.return_value

    def test_connect_uses_seed_node(self, aerospike_factory: MagicMock, connection: MagicMock):
        settings = load_connection_settings({"AEROSPIKE_HOST": "aero.local", "AEROSPIKE_PORT": "3100"})
        client = AerospikeClient(settings)

        client.connect()

        aerospike_factory.assert_called_once_with({"hosts": [("aero.local", 3100)]})
        assert client.client is connection

    def test_connect_failure_raises(self, aerospike_factory: MagicMock, default_settings: ConnectionSettings):
        aerospike_factory.return_value.connect.side_effect = aerospike_exception.AerospikeError()

        client = AerospikeClient(default_settings)
        with pytest.raises(DBError, match="Unable to connect to Aerospike"):
            client.connect()
        assert not client.is_connected()

    def test_disconnect(self, connection: MagicMock, default_settings: ConnectionSettings):
        client = AerospikeClient(default_settings)
        client.connect()

        client.disconnect()

        connection.close.assert_called_once_with()
        with pytest.raises(DBError, match="not connected"):
            client.disconnect()

    def test_record_operations(self, connection: MagicMock, default_settings: ConnectionSettings):
        key = ("test", "users", "user1")
        connection.get.return_value = (key, {"gen": 1}, {"name": "alice"})
        connection.exists.return_value = (key, {"gen": 1})
        client = AerospikeClient(default_settings)
        client.connect()

        client.put_record(key, {"name": "alice"})
        connection.put.assert_called_once_with(key, {"name": "alice"})

        assert client.get_record(key) == {"name": "alice"}
        assert client.exists_record(key)

        connection.exists.return_value = (key, None)
        assert not client.exists_record(key)

        client.remove_record(key)
        connection.remove.assert_called_once_with(key)
