"""Connection settings for the external systems the hooks talk to."""

import os
from typing import Mapping, NamedTuple, Optional

from .constants import CONNECTION_SETTINGS
from .types import ConnectionValues

__all__ = ["ConnectionSettings", "load_connection_settings", "connection_values"]


class ConnectionSettings(NamedTuple):
    cassandra_host: str
    cassandra_port: int
    mongo_host: str
    mongo_port: int
    es_node: str
    es_port: int
    aerospike_host: str
    aerospike_port: int
    selenium_grid: str

    @property
    def selenium_grid_url(self) -> str:
        return f"http://{self.selenium_grid}/wd/hub"

    @property
    def elasticsearch_url(self) -> str:
        return f"http://{self.es_node}:{self.es_port}"


def connection_values(env: Mapping[str, str]) -> ConnectionValues:
    """Picks the known connection settings out of an environment mapping.

    Args:
        env (Mapping[str, str]): Environment-like mapping (e.g., os.environ or a dotenv result).

    Returns:
        ConnectionValues: Only the keys listed in CONNECTION_SETTINGS that have a non-empty value.
    """
    values = {}
    for name, _ in CONNECTION_SETTINGS:
        value = env.get(name)
        if value is not None and value.strip():
            values[name] = value.strip()
    return values


def load_connection_settings(env: Optional[Mapping[str, str]] = None) -> ConnectionSettings:
    """Resolves the connection settings, falling back to the defaults for missing keys.

    Args:
        env (Optional[Mapping[str, str]]): Source mapping. Defaults to os.environ.

    Returns:
        ConnectionSettings: The resolved settings.

    Raises:
        ValueError: If a port setting is not an integer.
    """
    if env is None:
        env = os.environ

    resolved = {name: default for name, default in CONNECTION_SETTINGS}
    resolved.update(connection_values(env))

    fields = {}
    for name, value in resolved.items():
        field = name.lower()
        if field.endswith("_port"):
            if not value.isdigit():
                raise ValueError(f"{name} must be a port number, got {value!r}.")
            fields[field] = int(value)
        else:
            fields[field] = value

    return ConnectionSettings(**fields)
