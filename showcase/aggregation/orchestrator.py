"""Fetch-and-merge pipelines producing the showcase view models.

Every pipeline follows the same sequence, each step awaiting the previous:

1. query the primary collection (ordering applied by the store)
2. attach profiles through ``JoinResolver``
3. attach viewer state through ``PersonalizationResolver`` (feed only)
4. apply the client-side text filter (pure)

Any store failure or malformed row aborts the pipeline with ``FetchFailure``;
no partial list is ever returned.
"""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

import structlog

from showcase.comments.models import TALENT_COMMENTS, TalentComment
from showcase.core.errors import FetchFailure, StoreError, ValidationFailureError
from showcase.profiles.models import PROFILES, Profile
from showcase.service_requests.models import HOSTEL_SERVICES, ServiceRequest
from showcase.store.base import OrderBy, Record, RecordStore
from showcase.talents.models import TALENTS, SortKey, Talent

from .filtering import filter_views
from .joins import JoinResolver, parse_rows
from .personalization import PersonalizationResolver
from .views import AggregatedListView, AggregatedView


logger = structlog.get_logger(__name__)

TALENT_FILTER_FIELDS = ("title", "description", "tags")
PROFILE_FILTER_FIELDS = ("full_name", "email")


def parse_sort_key(sort_key: SortKey | str) -> SortKey:
    """Validate a feed sort key."""
    try:
        return SortKey(sort_key)
    except ValueError as e:
        allowed = ", ".join(k.value for k in SortKey)
        raise ValidationFailureError(
            f"Unsupported sort key '{sort_key}'. Allowed: {allowed}", field="sort"
        ) from e


class AggregationOrchestrator:
    """Compose queries, joins and personalization into view-model lists."""

    def __init__(
        self,
        store: RecordStore,
        joins: JoinResolver | None = None,
        personalization: PersonalizationResolver | None = None,
    ) -> None:
        self.store = store
        self.joins = joins or JoinResolver(store)
        self.personalization = personalization or PersonalizationResolver(store)

    async def _query(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        order_by: OrderBy | None = None,
    ) -> list[Record]:
        try:
            return await self.store.query(collection, filters, order_by)
        except StoreError as e:
            raise FetchFailure(f"Failed to load {collection}", collection=collection) from e

    # ==========================================================================
    # Talent feed
    # ==========================================================================

    async def fetch_talents(
        self,
        sort_key: SortKey | str,
        viewer_id: UUID | None,
    ) -> list[AggregatedView[Talent]]:
        """Steps 1-3 of the feed pipeline (no text filter)."""
        key = parse_sort_key(sort_key)
        rows = await self._query(TALENTS.name, order_by=OrderBy(key.value))
        talents = parse_rows(TALENTS.name, rows, Talent.from_row)
        views = await self.joins.resolve(talents, "user_id")
        views = await self.personalization.annotate(views, viewer_id)
        logger.info(
            "talent_feed_loaded",
            count=len(views),
            sort_key=key.value,
            personalized=viewer_id is not None,
        )
        return views

    async def load(
        self,
        sort_key: SortKey | str,
        filter_text: str,
        viewer_id: UUID | None,
    ) -> list[AggregatedView[Talent]]:
        """Full feed pipeline: fetch, join, personalize, then filter."""
        views = await self.fetch_talents(sort_key, viewer_id)
        return filter_views(views, filter_text, TALENT_FILTER_FIELDS)

    # ==========================================================================
    # Admin and thread pipelines
    # ==========================================================================

    async def load_admin_talents(self) -> list[AggregatedView[Talent]]:
        """Every talent, newest first, with its owner profile."""
        rows = await self._query(TALENTS.name, order_by=OrderBy(SortKey.CREATED_AT.value))
        return await self.joins.resolve(
            parse_rows(TALENTS.name, rows, Talent.from_row), "user_id"
        )

    async def load_service_requests(self) -> list[AggregatedView[ServiceRequest]]:
        """Every service request, newest first, with its requester profile."""
        rows = await self._query(HOSTEL_SERVICES.name, order_by=OrderBy("created_at"))
        return await self.joins.resolve(
            parse_rows(HOSTEL_SERVICES.name, rows, ServiceRequest.from_row), "user_id"
        )

    async def load_profiles(self, filter_text: str = "") -> list[AggregatedView[Profile]]:
        """Every profile, newest first, filtered on name and email."""
        rows = await self._query(PROFILES.name, order_by=OrderBy("created_at"))
        views = [
            AggregatedView(record=profile)
            for profile in parse_rows(PROFILES.name, rows, Profile.from_row)
        ]
        return filter_views(views, filter_text, PROFILE_FILTER_FIELDS)

    async def load_comment_thread(
        self, talent_id: UUID
    ) -> list[AggregatedView[TalentComment]]:
        """Comments of one talent, oldest first, with author profiles."""
        rows = await self._query(
            TALENT_COMMENTS.name,
            {"talent_id": talent_id},
            OrderBy("created_at", descending=False),
        )
        return await self.joins.resolve(
            parse_rows(TALENT_COMMENTS.name, rows, TalentComment.from_row), "user_id"
        )

    # ==========================================================================
    # View factories
    # ==========================================================================

    def talent_feed(
        self,
        sort_key: SortKey | str = SortKey.CREATED_AT,
        viewer_id: UUID | None = None,
        filter_text: str = "",
    ) -> AggregatedListView[Talent]:
        """Feed view; the filter is applied locally over the fetched list."""
        return AggregatedListView(
            "talent_feed",
            lambda: self.fetch_talents(sort_key, viewer_id),
            filter_fields=TALENT_FILTER_FIELDS,
            filter_text=filter_text,
        )

    def admin_talents(self) -> AggregatedListView[Talent]:
        return AggregatedListView("admin_talents", self.load_admin_talents)

    def service_requests(self) -> AggregatedListView[ServiceRequest]:
        return AggregatedListView("service_requests", self.load_service_requests)

    def user_directory(self, filter_text: str = "") -> AggregatedListView[Profile]:
        return AggregatedListView(
            "user_directory",
            self.load_profiles,
            filter_fields=PROFILE_FILTER_FIELDS,
            filter_text=filter_text,
        )

    def comment_thread(self, talent_id: UUID) -> AggregatedListView[TalentComment]:
        return AggregatedListView(
            f"comment_thread:{talent_id}",
            lambda: self.load_comment_thread(talent_id),
        )
