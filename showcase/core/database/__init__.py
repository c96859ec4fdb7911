"""Database connection module for the talent showcase."""

from showcase.core.database.async_cassandra import (
    CassandraConnection,
    cassandra_connected,
    init_async_cassandra,
    shutdown_async_cassandra,
)


__all__ = [
    "CassandraConnection",
    "cassandra_connected",
    "init_async_cassandra",
    "shutdown_async_cassandra",
]
