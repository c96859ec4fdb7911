"""Viewer-relative annotation of aggregated views."""

from dataclasses import replace
from typing import Any, TypeVar
from uuid import UUID

from showcase.core.errors import FetchFailure, StoreError
from showcase.store.base import RecordStore
from showcase.talents.models import TALENT_LIKES

from .views import AggregatedView


T = TypeVar("T")


class PersonalizationResolver:
    """Set ``is_liked_by_viewer`` from the viewer's like records.

    One query per call, scoped to the viewer; anonymous viewers and empty
    lists cost nothing.
    """

    def __init__(
        self,
        store: RecordStore,
        reaction_collection: str = TALENT_LIKES.name,
        item_field: str = "talent_id",
        viewer_field: str = "user_id",
    ) -> None:
        self.store = store
        self.reaction_collection = reaction_collection
        self.item_field = item_field
        self.viewer_field = viewer_field

    async def liked_ids(self, viewer_id: UUID) -> set[Any]:
        """Ids of every item the viewer has reacted to."""
        try:
            rows = await self.store.query(
                self.reaction_collection, {self.viewer_field: viewer_id}
            )
        except StoreError as e:
            raise FetchFailure(
                "Failed to load likes", collection=self.reaction_collection
            ) from e
        return {row.get(self.item_field) for row in rows}

    async def annotate(
        self,
        views: list[AggregatedView[T]],
        viewer_id: UUID | None,
    ) -> list[AggregatedView[T]]:
        if viewer_id is None or not views:
            return [replace(v, is_liked_by_viewer=False) for v in views]

        liked = await self.liked_ids(viewer_id)
        return [replace(v, is_liked_by_viewer=v.id in liked) for v in views]
