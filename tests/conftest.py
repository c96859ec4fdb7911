"""Shared fixtures for the showcase test suite."""

import asyncio
import os
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

import pytest


# Settings are cached on first use, so the environment is set before any
# showcase import.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("PROTECTED_IDENTITIES", '["root@example.com"]')

from fastapi.testclient import TestClient  # noqa: E402

from showcase.auth.permissions import UserRole  # noqa: E402
from showcase.auth.security import viewer_token  # noqa: E402
from showcase.core.errors import StoreError  # noqa: E402
from showcase.store.base import OrderBy, Record, RecordKey  # noqa: E402
from showcase.store.memory import InMemoryRecordStore  # noqa: E402
from showcase.store.schema import COLLECTIONS, DERIVED_COUNTS  # noqa: E402


BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


# ==============================================================================
# Record builders
# ==============================================================================


def profile_row(
    full_name: str = "Asha Rao",
    email: str | None = None,
    role: str = "user",
    profile_id: UUID | None = None,
    **extra: Any,
) -> Record:
    return {
        "id": profile_id or uuid4(),
        "full_name": full_name,
        "email": email or f"{full_name.split()[0].lower()}@example.com",
        "role": role,
        "department": extra.get("department"),
        "year": extra.get("year"),
        "created_at": extra.get("created_at", BASE_TIME),
    }


def talent_row(
    user_id: UUID,
    title: str = "Untitled",
    tags: list[str] | None = None,
    minutes: int = 0,
    likes_count: int = 0,
    **extra: Any,
) -> Record:
    return {
        "id": extra.get("talent_id") or uuid4(),
        "user_id": user_id,
        "title": title,
        "description": extra.get("description", ""),
        "category": extra.get("category", "Music"),
        "tags": tags or [],
        "media_url": "https://media.example.com/a.jpg",
        "media_type": extra.get("media_type", "image"),
        "likes_count": likes_count,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }


def service_row(user_id: UUID, status: str = "Pending", minutes: int = 0) -> Record:
    return {
        "id": uuid4(),
        "user_id": user_id,
        "service_type": "Plumbing",
        "hostel_block": "B",
        "room_number": "204",
        "status": status,
        "priority": "High",
        "description": "Leaking tap",
        "created_at": BASE_TIME + timedelta(minutes=minutes),
        "updated_at": None,
    }


def run(coro):
    """Drive a coroutine from synchronous test code."""
    return asyncio.run(coro)


def auth_headers(row: Mapping[str, Any]) -> dict[str, str]:
    token = viewer_token(row["id"], row["email"], row["role"])
    return {"Authorization": f"Bearer {token}"}


# ==============================================================================
# Stores
# ==============================================================================


class RecordingStore(InMemoryRecordStore):
    """In-memory store that records every call and can be told to fail."""

    def __init__(self) -> None:
        super().__init__(COLLECTIONS, DERIVED_COUNTS)
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[tuple[str, str]] = set()

    def _record(self, op: str, collection: str) -> None:
        self.calls.append((op, collection))
        if (op, collection) in self.fail_on or (op, "*") in self.fail_on:
            raise StoreError(f"{op} on {collection} failed", collection=collection)

    def calls_for(self, op: str, collection: str | None = None) -> list[tuple[str, str]]:
        return [
            c for c in self.calls if c[0] == op and (collection is None or c[1] == collection)
        ]

    async def query(self, collection, filters=None, order_by: OrderBy | None = None):
        self._record("query", collection)
        return await super().query(collection, filters, order_by)

    async def select_in(self, collection, field, values):
        values = list(values)
        self._record("select_in", collection)
        self.last_select_in = (collection, field, values)
        return await super().select_in(collection, field, values)

    async def insert(self, collection, record):
        self._record("insert", collection)
        return await super().insert(collection, record)

    async def update(self, collection, record_id: RecordKey, patch):
        self._record("update", collection)
        return await super().update(collection, record_id, patch)

    async def delete(self, collection, key: RecordKey):
        self._record("delete", collection)
        return await super().delete(collection, key)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client over the app with a fresh in-memory store."""
    from showcase.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_store(client: TestClient) -> InMemoryRecordStore:
    return client.app.state.store


@pytest.fixture
def admin_row(app_store: InMemoryRecordStore) -> Record:
    row = profile_row("Priya Admin", role=UserRole.ADMIN.value)
    run(app_store.insert("profiles", row))
    return row


@pytest.fixture
def user_row(app_store: InMemoryRecordStore) -> Record:
    row = profile_row("Ravi Kumar")
    run(app_store.insert("profiles", row))
    return row
