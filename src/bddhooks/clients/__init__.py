from .aerospike import AerospikeClient
from .cassandra import CassandraClient
from .elasticsearch import ElasticSearchClient
from .mongodb import MongoDBClient

__all__ = ["AerospikeClient", "CassandraClient", "ElasticSearchClient", "MongoDBClient"]
