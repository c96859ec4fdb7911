"""Record store client: contract and backends."""

from .base import (
    CollectionSpec,
    DerivedCount,
    OrderBy,
    Record,
    RecordKey,
    RecordStore,
)
from .cassandra import CassandraRecordStore
from .memory import InMemoryRecordStore


__all__ = [
    "CassandraRecordStore",
    "CollectionSpec",
    "DerivedCount",
    "InMemoryRecordStore",
    "OrderBy",
    "Record",
    "RecordKey",
    "RecordStore",
]
