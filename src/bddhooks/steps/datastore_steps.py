"""Steps over the data store clients connected by the tagged hooks."""

from typing import List

from behave import given, then, when
from behave.model import Table
from behave.runner import Context

from ..types import Document
from ..utils import fail
from .common_steps import capture_exceptions, get_commonspec


def table_to_documents(table: Table) -> List[Document]:
    """Turns a behave table into one document per row, keyed by the headings."""
    if table is None:
        fail("This step requires a data table.")
    return [{heading: row[heading] for heading in table.headings} for row in table]


# --- Cassandra ---


@when("I create a Cassandra keyspace named '{keyspace}'")
def step_create_keyspace(context: Context, keyspace: str):
    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        commonspec.get_cassandra_client().create_keyspace(keyspace)


@when("I drop the Cassandra keyspace '{keyspace}'")
def step_drop_keyspace(context: Context, keyspace: str):
    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        commonspec.get_cassandra_client().drop_keyspace(keyspace)


@then("a Cassandra keyspace '{keyspace}' exists")
def step_keyspace_exists(context: Context, keyspace: str):
    keyspaces = get_commonspec(context).get_cassandra_client().get_keyspaces()
    assert keyspace in keyspaces, f"Keyspace {keyspace!r} not found in {keyspaces!r}"


@then("a Cassandra keyspace '{keyspace}' does not exist")
def step_keyspace_not_exists(context: Context, keyspace: str):
    assert not get_commonspec(context).get_cassandra_client().exists_keyspace(
        keyspace
    ), f"Keyspace {keyspace!r} still exists"


# --- MongoDB ---


@given("I use the MongoDB database '{database}'")
def step_use_database(context: Context, database: str):
    get_commonspec(context).get_mongodb_client().connect_to_database(database)


@when("I insert into the MongoDB collection '{collection}'")
def step_insert_documents(context: Context, collection: str):
    """
    When step: Inserts one document per table row.
    """
    commonspec = get_commonspec(context)
    documents = table_to_documents(context.table)
    with capture_exceptions(commonspec):
        commonspec.get_mongodb_client().insert_documents(collection, documents)


@then("the MongoDB collection '{collection}' has {count:d} documents")
def step_count_documents(context: Context, collection: str, count: int):
    documents = get_commonspec(context).get_mongodb_client().read_documents(collection)
    assert len(documents) == count, f"Expected {count} documents in {collection!r}, found {len(documents)}"


@when("I drop the MongoDB database '{database}'")
def step_drop_database(context: Context, database: str):
    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        commonspec.get_mongodb_client().drop_database(database)


# --- ElasticSearch ---


@when("I create an elasticsearch index named '{index}'")
def step_create_index(context: Context, index: str):
    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        commonspec.get_elasticsearch_client().create_index(index)


@when("I drop the elasticsearch index '{index}'")
def step_drop_index(context: Context, index: str):
    commonspec = get_commonspec(context)
    with capture_exceptions(commonspec):
        commonspec.get_elasticsearch_client().drop_index(index)


@then("an elasticsearch index named '{index}' exists")
def step_index_exists(context: Context, index: str):
    assert get_commonspec(context).get_elasticsearch_client().index_exists(index), f"Index {index!r} not found"


# --- Aerospike ---


@when("I insert into the Aerospike namespace '{namespace}' and set '{set_name}'")
def step_put_records(context: Context, namespace: str, set_name: str):
    """
    When step: Writes one record per table row. The 'key' column is the record
    key; every other column becomes a bin.
    """
    commonspec = get_commonspec(context)
    client = commonspec.get_aerospike_client()
    for document in table_to_documents(context.table):
        if "key" not in document:
            fail("The data table requires a 'key' column.")
        key = document.pop("key")
        with capture_exceptions(commonspec):
            client.put_record((namespace, set_name, key), document)


@then("the Aerospike record '{key}' exists in namespace '{namespace}' and set '{set_name}'")
def step_record_exists(context: Context, key: str, namespace: str, set_name: str):
    client = get_commonspec(context).get_aerospike_client()
    assert client.exists_record((namespace, set_name, key)), f"Record {key!r} not found in {namespace}.{set_name}"
