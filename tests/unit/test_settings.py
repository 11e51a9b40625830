import pytest

from src.bddhooks.settings import connection_values, load_connection_settings


def test_defaults_when_environment_is_empty():
    settings = load_connection_settings({})

    assert settings.cassandra_host == "127.0.0.1"
    assert settings.cassandra_port == 9042
    assert settings.mongo_host == "127.0.0.1"
    assert settings.mongo_port == 27017
    assert settings.es_node == "127.0.0.1"
    assert settings.es_port == 9200
    assert settings.aerospike_host == "127.0.0.1"
    assert settings.aerospike_port == 3000
    assert settings.selenium_grid == "127.0.0.1:4444"


def test_values_override_defaults():
    settings = load_connection_settings(
        {
            "CASSANDRA_HOST": "cassandra.local",
            "MONGO_PORT": "27018",
            "ES_NODE": "es.local",
            "SELENIUM_GRID": "grid.local:5555",
        }
    )

    assert settings.cassandra_host == "cassandra.local"
    assert settings.mongo_port == 27018, "Ports should be converted to integers."
    assert settings.elasticsearch_url == "http://es.local:9200"
    assert settings.selenium_grid_url == "http://grid.local:5555/wd/hub"


def test_reads_os_environ_by_default(mocker):
    mocker.patch.dict("os.environ", {"AEROSPIKE_HOST": "aero.local"}, clear=True)

    assert load_connection_settings().aerospike_host == "aero.local"


def test_invalid_port_raises():
    with pytest.raises(ValueError, match="MONGO_PORT must be a port number"):
        load_connection_settings({"MONGO_PORT": "mongo"})


def test_connection_values_filters_unknown_and_empty_keys():
    values = connection_values(
        {
            "MONGO_HOST": " mongo.local ",
            "ES_NODE": "   ",
            "HOME": "/root",
            "BDDHOOKS_TAGS": "@web",
        }
    )

    assert values == {"MONGO_HOST": "mongo.local"}, "Only known, non-empty connection settings should be kept."
