"""Cassandra-backed record store.

Maps the generic ``RecordStore`` operations onto CQL against one table per
collection, using prepared statements and ``session.aexecute()``.

Cassandra cannot order rows across partitions, so ``order_by`` is applied
after the fetch. Writes use lightweight transactions (``IF NOT EXISTS`` /
``IF EXISTS``) so that derived counters only move when a row was really
created or removed, and so that a composite key can never be inserted twice.

Derived counts live in COUNTER tables updated with ``count = count + 1``,
so concurrent likes never lose an increment. Reads of the target collection
merge the counter back into each row.
"""

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from showcase.core.errors import StoreError

from .base import (
    CollectionSpec,
    DerivedCount,
    OrderBy,
    Record,
    RecordKey,
    sort_records,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


def _row_to_record(row: Any) -> Record:
    """Convert a driver row (named tuple or mapping) into a plain dict."""
    if hasattr(row, "_asdict"):
        return dict(row._asdict())
    return dict(row)


def _was_applied(result: Any) -> bool:
    """Read the ``[applied]`` flag of a lightweight transaction result."""
    applied = getattr(result, "was_applied", None)
    if isinstance(applied, bool):
        return applied
    row = result[0] if result else None
    if row is None:
        return True
    return bool(_row_to_record(row).get("[applied]", True))


class CassandraRecordStore:
    """``RecordStore`` over a Cassandra keyspace."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        collections: Iterable[CollectionSpec],
        derived_counts: Iterable[DerivedCount] = (),
    ) -> None:
        self.session = session
        self.keyspace = keyspace
        self.specs: dict[str, CollectionSpec] = {c.name: c for c in collections}
        self.derived_counts = list(derived_counts)
        self._statements: dict[str, Any] = {}

    # ==========================================================================
    # Statement helpers
    # ==========================================================================

    def _spec(self, collection: str) -> CollectionSpec:
        spec = self.specs.get(collection)
        if spec is None:
            raise StoreError(
                f"Unknown collection '{collection}'", collection=collection
            )
        return spec

    def _prepare(self, cql: str) -> Any:
        """Prepare a statement once and reuse it."""
        statement = self._statements.get(cql)
        if statement is None:
            statement = self.session.prepare(cql)
            self._statements[cql] = statement
        return statement

    async def _execute(self, collection: str, cql: str, params: list[Any]) -> Any:
        try:
            return await self.session.aexecute(self._prepare(cql), params)
        except Exception as e:
            logger.error(
                "cassandra_request_failed",
                collection=collection,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreError(
                f"Request on '{collection}' failed: {e}", collection=collection
            ) from e

    @staticmethod
    def _where(fields: Iterable[str]) -> str:
        return " AND ".join(f"{field} = ?" for field in fields)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Record]:
        self._spec(collection)
        cql = f"SELECT * FROM {self.keyspace}.{collection}"
        params: list[Any] = []
        if filters:
            cql += f" WHERE {self._where(filters)} ALLOW FILTERING"
            params = list(filters.values())
        rows = await self._execute(collection, cql, params)
        records = await self._merge_counts(collection, [_row_to_record(r) for r in rows])
        return sort_records(records, order_by)

    async def select_in(
        self,
        collection: str,
        field: str,
        values: Iterable[Any],
    ) -> list[Record]:
        self._spec(collection)
        keys = list(values)
        if not keys:
            return []
        cql = f"SELECT * FROM {self.keyspace}.{collection} WHERE {field} IN ?"
        rows = await self._execute(collection, cql, [keys])
        return await self._merge_counts(collection, [_row_to_record(r) for r in rows])

    # ==========================================================================
    # Writes
    # ==========================================================================

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        self._spec(collection)
        counted = {
            rule.target_field
            for rule in self._counter_rules()
            if rule.target == collection
        }
        row = {k: v for k, v in record.items() if k not in counted}
        placeholders = ", ".join("?" for _ in row)
        cql = (
            f"INSERT INTO {self.keyspace}.{collection} ({', '.join(row)}) "
            f"VALUES ({placeholders}) IF NOT EXISTS"
        )
        result = await self._execute(collection, cql, list(row.values()))
        if not _was_applied(result):
            raise StoreError(
                f"Duplicate key in '{collection}'",
                code="duplicate_record",
                collection=collection,
            )
        await self._adjust_counts(collection, record, 1)
        return dict(record)

    async def update(
        self,
        collection: str,
        record_id: RecordKey,
        patch: Mapping[str, Any],
    ) -> None:
        key_filter = self._key_filter(collection, record_id)
        assignments = ", ".join(f"{field} = ?" for field in patch)
        cql = (
            f"UPDATE {self.keyspace}.{collection} SET {assignments} "
            f"WHERE {self._where(key_filter)} IF EXISTS"
        )
        result = await self._execute(
            collection, cql, [*patch.values(), *key_filter.values()]
        )
        if not _was_applied(result):
            raise StoreError(
                f"No record in '{collection}' matches the key",
                code="record_not_found",
                collection=collection,
            )

    async def delete(self, collection: str, key: RecordKey) -> None:
        key_filter = self._key_filter(collection, key)
        cql = (
            f"DELETE FROM {self.keyspace}.{collection} "
            f"WHERE {self._where(key_filter)} IF EXISTS"
        )
        result = await self._execute(collection, cql, list(key_filter.values()))
        if not _was_applied(result):
            return
        await self._adjust_counts(collection, key_filter, -1)
        for rule in self._counter_rules():
            if rule.target == collection:
                await self._execute(
                    rule.counter_table,
                    f"DELETE FROM {self.keyspace}.{rule.counter_table} "
                    f"WHERE {rule.source_field} = ?",
                    list(key_filter.values()),
                )

    def _key_filter(self, collection: str, key: RecordKey) -> dict[str, Any]:
        try:
            return self._spec(collection).key_filter(key)
        except ValueError as e:
            raise StoreError(str(e), collection=collection) from e

    def _counter_rules(self) -> list[DerivedCount]:
        return [rule for rule in self.derived_counts if rule.counter_table]

    async def _adjust_counts(
        self, collection: str, row: Mapping[str, Any], delta: int
    ) -> None:
        """Increment or decrement the counters fed by ``collection``."""
        sign = "+" if delta > 0 else "-"
        for rule in self._counter_rules():
            if rule.source != collection:
                continue
            await self._execute(
                rule.counter_table,
                f"UPDATE {self.keyspace}.{rule.counter_table} "
                f"SET {rule.target_field} = {rule.target_field} {sign} 1 "
                f"WHERE {rule.source_field} = ?",
                [row.get(rule.source_field)],
            )

    async def _merge_counts(self, collection: str, records: list[Record]) -> list[Record]:
        """Copy counter values onto ``target`` rows; missing counters read as zero."""
        ids = [r.get("id") for r in records if r.get("id") is not None]
        for rule in self._counter_rules():
            if rule.target != collection:
                continue
            counts: dict[Any, int] = {}
            if ids:
                rows = await self._execute(
                    rule.counter_table,
                    f"SELECT {rule.source_field}, {rule.target_field} "
                    f"FROM {self.keyspace}.{rule.counter_table} "
                    f"WHERE {rule.source_field} IN ?",
                    [ids],
                )
                for row in rows:
                    row = _row_to_record(row)
                    counts[row.get(rule.source_field)] = row.get(rule.target_field) or 0
            for record in records:
                record[rule.target_field] = max(0, counts.get(record.get("id"), 0))
        return records
