"""Tests for the client-side join resolver."""

from uuid import uuid4

import pytest

from conftest import RecordingStore, profile_row, talent_row
from showcase.aggregation.joins import JoinResolver, distinct_keys
from showcase.core.errors import FetchFailure
from showcase.talents.models import Talent


def test_distinct_keys_first_appearance_order() -> None:
    a, b = uuid4(), uuid4()
    rows = [{"user_id": b}, {"user_id": a}, {"user_id": b}, {"user_id": None}]

    assert distinct_keys(rows, "user_id") == [b, a]


class TestJoinResolver:
    """Tests for JoinResolver.resolve."""

    @pytest.mark.asyncio
    async def test_empty_primary_skips_secondary_query(self, store: RecordingStore) -> None:
        views = await JoinResolver(store).resolve([], "user_id")

        assert views == []
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_keys_single_deduplicated_query(
        self, store: RecordingStore
    ) -> None:
        author = profile_row("Meera Iyer")
        await store.insert("profiles", author)
        talents = [
            Talent.from_row(talent_row(author["id"], "one")),
            Talent.from_row(talent_row(author["id"], "two")),
            Talent.from_row(talent_row(author["id"], "three")),
        ]
        store.calls.clear()

        views = await JoinResolver(store).resolve(talents, "user_id")

        assert store.calls == [("select_in", "profiles")]
        assert store.last_select_in == ("profiles", "id", [author["id"]])
        assert [v.profile.full_name for v in views] == ["Meera Iyer"] * 3
        assert [v.record.title for v in views] == ["one", "two", "three"]

    @pytest.mark.asyncio
    async def test_deleted_profile_resolves_to_none(self, store: RecordingStore) -> None:
        present = profile_row("Present Person")
        await store.insert("profiles", present)
        gone = uuid4()
        talents = [
            Talent.from_row(talent_row(gone, "orphan a")),
            Talent.from_row(talent_row(present["id"], "kept")),
            Talent.from_row(talent_row(gone, "orphan b")),
        ]

        views = await JoinResolver(store).resolve(talents, "user_id")

        assert [v.profile is None for v in views] == [True, False, True]

    @pytest.mark.asyncio
    async def test_secondary_failure_is_fetch_failure(self, store: RecordingStore) -> None:
        store.fail_on.add(("select_in", "profiles"))
        talents = [Talent.from_row(talent_row(uuid4()))]

        with pytest.raises(FetchFailure) as exc_info:
            await JoinResolver(store).resolve(talents, "user_id")

        assert exc_info.value.collection == "profiles"
