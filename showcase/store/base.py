"""Record store contract.

The aggregation layer talks to storage only through ``RecordStore``: named
collections of flat records (dicts), equality filters, a single sort key,
batched membership lookups and key-addressed writes. There are no joins;
stitching related collections together is the job of
``showcase.aggregation``.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID


Record = dict[str, Any]
RecordKey = str | UUID | Mapping[str, Any]


@dataclass(frozen=True)
class OrderBy:
    """Sort specification for a query."""

    field: str
    descending: bool = True


@dataclass(frozen=True)
class CollectionSpec:
    """Name and primary key layout of a collection."""

    name: str
    key_fields: tuple[str, ...] = ("id",)

    def key_of(self, record: Mapping[str, Any]) -> tuple[Any, ...]:
        """Return the primary key tuple of a record."""
        return tuple(record.get(field) for field in self.key_fields)

    def key_filter(self, key: RecordKey) -> dict[str, Any]:
        """Normalize an id or composite key mapping into field filters."""
        if isinstance(key, Mapping):
            missing = [f for f in self.key_fields if f not in key]
            if missing:
                msg = f"Key for '{self.name}' is missing fields: {', '.join(missing)}"
                raise ValueError(msg)
            return {f: key[f] for f in self.key_fields}
        if len(self.key_fields) != 1:
            msg = f"Collection '{self.name}' requires a composite key"
            raise ValueError(msg)
        return {self.key_fields[0]: key}


@dataclass(frozen=True)
class DerivedCount:
    """Counter the store maintains on ``target`` for rows of ``source``.

    Inserting a ``source`` row increments ``target.target_field`` on the
    record whose id equals ``source.source_field``; deleting decrements it,
    never below zero. Only rows that were really created or removed count.

    Backends that cannot update a field atomically keep the value in
    ``counter_table``, keyed by ``source_field``, and merge it into ``target``
    rows on read.
    """

    source: str
    source_field: str
    target: str
    target_field: str
    counter_table: str | None = None


class RecordStore(Protocol):
    """Generic CRUD and filtered query interface over named collections.

    Every method raises ``showcase.core.errors.StoreError`` on failure.
    """

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Record]: ...

    async def select_in(
        self,
        collection: str,
        field: str,
        values: Iterable[Any],
    ) -> list[Record]: ...

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record: ...

    async def update(
        self,
        collection: str,
        record_id: RecordKey,
        patch: Mapping[str, Any],
    ) -> None: ...

    async def delete(self, collection: str, key: RecordKey) -> None: ...


def sort_records(records: list[Record], order_by: OrderBy | None) -> list[Record]:
    """Sort records by one field; missing values sort lowest."""
    if order_by is None:
        return records

    def sort_key(record: Record) -> tuple[bool, Any]:
        value = record.get(order_by.field)
        return (value is not None, value if value is not None else 0)

    return sorted(records, key=sort_key, reverse=order_by.descending)


def matches(record: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    """Equality match of a record against field filters."""
    if not filters:
        return True
    return all(record.get(field) == value for field, value in filters.items())
