"""Client-side join of a primary result set with a secondary collection.

The store has no joins, so related records are attached in two steps:
collect the distinct foreign keys of the primary rows, fetch every matching
secondary row with one batched membership query, then attach through an
in-memory map. A primary list never causes more than one secondary query.
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import structlog

from showcase.core.errors import FetchFailure, StoreError
from showcase.profiles.models import PROFILES, Profile
from showcase.store.base import Record, RecordStore

from .views import AggregatedView


logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def field_value(record: Any, field: str) -> Any:
    """Read a field from a dict row or an attribute-style record."""
    if isinstance(record, dict):
        return record.get(field)
    return getattr(record, field, None)


def distinct_keys(records: Sequence[Any], field: str) -> list[Any]:
    """Distinct non-null values of ``field`` in first-appearance order."""
    return list(dict.fromkeys(
        key for key in (field_value(r, field) for r in records) if key is not None
    ))


def parse_rows(
    collection: str, rows: Sequence[Record], factory: Callable[[Record], R]
) -> list[R]:
    """Build records from store rows; a malformed row fails the whole fetch."""
    try:
        return [factory(row) for row in rows]
    except (KeyError, TypeError, ValueError) as e:
        logger.error(
            "store_row_malformed",
            collection=collection,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise FetchFailure(
            f"Malformed record in {collection}", collection=collection
        ) from e


class JoinResolver:
    """Attach secondary records (profiles by default) to primary records."""

    def __init__(
        self,
        store: RecordStore,
        secondary_factory: Callable[[Record], Any] = Profile.from_row,
    ) -> None:
        self.store = store
        self.secondary_factory = secondary_factory

    async def resolve(
        self,
        primary_records: Sequence[T],
        foreign_key: str,
        secondary_collection: str = PROFILES.name,
        secondary_key: str = "id",
    ) -> list[AggregatedView[T]]:
        """Return one ``AggregatedView`` per primary record.

        Records whose foreign key has no match get ``profile=None``.

        Raises:
            FetchFailure: If the secondary query fails.
        """
        keys = distinct_keys(primary_records, foreign_key)
        if not keys:
            return [AggregatedView(record=r) for r in primary_records]

        try:
            rows = await self.store.select_in(secondary_collection, secondary_key, keys)
        except StoreError as e:
            raise FetchFailure(
                f"Failed to load {secondary_collection}", collection=secondary_collection
            ) from e

        parsed = parse_rows(secondary_collection, rows, self.secondary_factory)
        secondary_map = {
            row.get(secondary_key): record for row, record in zip(rows, parsed)
        }
        missing = len(set(keys) - secondary_map.keys())
        if missing:
            logger.info(
                "join_keys_unresolved",
                collection=secondary_collection,
                requested=len(keys),
                missing=missing,
            )

        return [
            AggregatedView(
                record=r,
                profile=secondary_map.get(field_value(r, foreign_key)),
            )
            for r in primary_records
        ]
