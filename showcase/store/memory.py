"""In-process record store.

Used for local development (``STORE_BACKEND=memory``) and tests. Behaves
like the Cassandra backend from the caller's point of view: records are
copied in and out, composite keys are unique, and derived counters are
maintained on insert/delete.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from showcase.core.errors import StoreError

from .base import (
    CollectionSpec,
    DerivedCount,
    OrderBy,
    Record,
    RecordKey,
    matches,
    sort_records,
)


logger = structlog.get_logger(__name__)


class InMemoryRecordStore:
    """Dict-backed ``RecordStore`` implementation."""

    def __init__(
        self,
        collections: Iterable[CollectionSpec],
        derived_counts: Iterable[DerivedCount] = (),
    ) -> None:
        self.specs: dict[str, CollectionSpec] = {c.name: c for c in collections}
        self.derived_counts = list(derived_counts)
        self._rows: dict[str, dict[tuple[Any, ...], Record]] = {
            name: {} for name in self.specs
        }

    def _spec(self, collection: str) -> CollectionSpec:
        spec = self.specs.get(collection)
        if spec is None:
            raise StoreError(
                f"Unknown collection '{collection}'", collection=collection
            )
        return spec

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Record]:
        self._spec(collection)
        rows = [
            copy.deepcopy(row)
            for row in self._rows[collection].values()
            if matches(row, filters)
        ]
        return sort_records(rows, order_by)

    async def select_in(
        self,
        collection: str,
        field: str,
        values: Iterable[Any],
    ) -> list[Record]:
        self._spec(collection)
        wanted = set(values)
        return [
            copy.deepcopy(row)
            for row in self._rows[collection].values()
            if row.get(field) in wanted
        ]

    async def insert(self, collection: str, record: Mapping[str, Any]) -> Record:
        spec = self._spec(collection)
        key = spec.key_of(record)
        if any(part is None for part in key):
            raise StoreError(
                f"Record for '{collection}' is missing key fields",
                collection=collection,
            )
        if key in self._rows[collection]:
            raise StoreError(
                f"Duplicate key in '{collection}'",
                code="duplicate_record",
                collection=collection,
            )
        row = copy.deepcopy(dict(record))
        self._rows[collection][key] = row
        self._adjust_counts(collection, row, 1)
        return copy.deepcopy(row)

    async def update(
        self,
        collection: str,
        record_id: RecordKey,
        patch: Mapping[str, Any],
    ) -> None:
        row = self._find(collection, record_id)
        if row is None:
            raise StoreError(
                f"No record in '{collection}' matches the key",
                code="record_not_found",
                collection=collection,
            )
        row.update(copy.deepcopy(dict(patch)))

    async def delete(self, collection: str, key: RecordKey) -> None:
        spec = self._spec(collection)
        row = self._find(collection, key)
        if row is None:
            return
        del self._rows[collection][spec.key_of(row)]
        self._adjust_counts(collection, row, -1)

    def _find(self, collection: str, key: RecordKey) -> Record | None:
        spec = self._spec(collection)
        try:
            key_filter = spec.key_filter(key)
        except ValueError as e:
            raise StoreError(str(e), collection=collection) from e
        return self._rows[collection].get(
            tuple(key_filter[f] for f in spec.key_fields)
        )

    def _adjust_counts(self, collection: str, row: Record, delta: int) -> None:
        for rule in self.derived_counts:
            if rule.source != collection:
                continue
            target_spec = self._spec(rule.target)
            target = self._rows[rule.target].get((row.get(rule.source_field),))
            if target is None or len(target_spec.key_fields) != 1:
                logger.debug(
                    "derived_count_target_missing",
                    collection=rule.target,
                    key=str(row.get(rule.source_field)),
                )
                continue
            target[rule.target_field] = max(0, (target.get(rule.target_field) or 0) + delta)
