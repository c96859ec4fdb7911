"""Cassandra session lifecycle for the record store backend.

The session comes from cassandra-asyncio-driver, whose ``aexecute()`` makes
statements awaitable. Driver modules are imported on connect so the in-memory
backend runs without them installed.
"""

from typing import Any

import structlog

from showcase.config.settings import Settings, get_settings
from showcase.store.schema import ALL_TABLES_CQL


logger = structlog.get_logger(__name__)


def replication_options(settings: Settings) -> dict[str, str | int]:
    """Keyspace replication for the current environment."""
    if settings.is_production:
        return {
            "class": "NetworkTopologyStrategy",
            settings.cassandra_datacenter: settings.cassandra_replication_factor,
        }
    return {"class": "SimpleStrategy", "replication_factor": 1}


def keyspace_cql(keyspace: str, replication: dict[str, str | int]) -> str:
    options = ", ".join(
        f"'{key}': {value}" if isinstance(value, int) else f"'{key}': '{value}'"
        for key, value in replication.items()
    )
    return (
        f"CREATE KEYSPACE IF NOT EXISTS {keyspace} "
        f"WITH replication = {{{options}}} AND durable_writes = true"
    )


class CassandraConnection:
    """Owns one cluster and its session."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.cluster: Any = None
        self.session: Any = None

    def connect(self) -> Any:
        """Open the session, reusing an existing one.

        Raises:
            ConnectionError: The cluster could not be reached.
        """
        if self.session is not None:
            return self.session

        from cassandra.auth import PlainTextAuthProvider  # noqa: PLC0415
        from cassandra.policies import (  # noqa: PLC0415
            DCAwareRoundRobinPolicy,
            TokenAwarePolicy,
        )
        from cassandra_asyncio.cluster import Cluster  # noqa: PLC0415

        settings = self.settings
        auth_provider = None
        if settings.cassandra_username and settings.cassandra_password:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password,
            )

        self.cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
            connect_timeout=settings.cassandra_connect_timeout,
        )
        try:
            session = self.cluster.connect()
        except Exception as e:
            logger.error("cassandra_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        # Store round trips time out here; the aggregation layer has no timers
        session.default_timeout = settings.cassandra_request_timeout
        self.session = session
        logger.info(
            "cassandra_connected",
            hosts=settings.cassandra_hosts,
            port=settings.cassandra_port,
        )
        return session

    async def create_schema(self) -> None:
        """Create the keyspace and every showcase table if missing."""
        keyspace = self.settings.cassandra_keyspace
        await self.session.aexecute(
            keyspace_cql(keyspace, replication_options(self.settings))
        )
        self.session.set_keyspace(keyspace)
        for table_cql in ALL_TABLES_CQL:
            await self.session.aexecute(table_cql.format(keyspace=keyspace))
        logger.info("cassandra_schema_ready", keyspace=keyspace, tables=len(ALL_TABLES_CQL))

    def close(self) -> None:
        if self.session is not None:
            self.session.shutdown()
            self.session = None
        if self.cluster is not None:
            self.cluster.shutdown()
            self.cluster = None
        logger.info("cassandra_connection_closed")

    @property
    def is_connected(self) -> bool:
        return self.session is not None and not self.session.is_shutdown


_connection: CassandraConnection | None = None


async def init_async_cassandra(settings: Settings | None = None) -> Any:
    """Connect, create the schema and return the session."""
    global _connection  # noqa: PLW0603
    if _connection is None:
        _connection = CassandraConnection(settings or get_settings())
    _connection.connect()
    await _connection.create_schema()
    return _connection.session


async def shutdown_async_cassandra() -> None:
    global _connection  # noqa: PLW0603
    if _connection is not None:
        _connection.close()
        _connection = None


def cassandra_connected() -> bool:
    return _connection is not None and _connection.is_connected
