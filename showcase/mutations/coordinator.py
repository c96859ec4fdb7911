"""State-changing actions against the record store.

Each action validates locally, performs its writes, then re-fetches the
affected view through its loader. There is no local patch-and-reconcile: the
refreshed view is the only source of the post-mutation state, including the
store-maintained ``likes_count``.

Actions never raise ``ShowcaseError``. Failures come back as a failed
``ActionResult`` with the view left untouched, and nothing is retried.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog

from showcase.aggregation.joins import parse_rows
from showcase.aggregation.views import AggregatedListView, ErrorDescriptor
from showcase.comments.models import TALENT_COMMENTS, create_comment
from showcase.config.settings import Settings
from showcase.core.errors import (
    AuthRequiredError,
    NotFoundError,
    PermissionDeniedError,
    ShowcaseError,
    StoreError,
    ValidationFailureError,
    describe_error,
)
from showcase.moderation.state_machine import Actor, ModerationStateMachine
from showcase.profiles.models import PROFILES, Profile
from showcase.service_requests.models import HOSTEL_SERVICES
from showcase.storage.service import MediaStore, StorageError
from showcase.store.base import RecordStore
from showcase.talents.models import (
    TALENT_LIKES,
    TALENTS,
    MediaType,
    TalentCategory,
    create_talent,
    like_record,
    parse_tags,
)


logger = structlog.get_logger(__name__)


# ==============================================================================
# Inputs and results
# ==============================================================================


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a coordinator action."""

    success: bool
    error: ErrorDescriptor | None = None

    @classmethod
    def ok(cls) -> "ActionResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: ShowcaseError) -> "ActionResult":
        return cls(success=False, error=ErrorDescriptor.from_error(error))


@dataclass(frozen=True)
class MediaUpload:
    """A media file selected for upload."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        suffix = Path(self.filename or "").suffix.lstrip(".").lower()
        if suffix:
            return suffix
        return (self.content_type or "").rsplit("/", 1)[-1].lower() or "bin"


@dataclass(frozen=True)
class TalentDraft:
    """Form fields of a talent upload."""

    title: str
    description: str = ""
    category: TalentCategory | str = TalentCategory.OTHER
    tags: str = ""


def media_path(viewer_id: UUID, extension: str, now_ms: int | None = None) -> str:
    """Storage path of an upload: ``{viewer_id}-{epoch_ms}.{ext}``."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{viewer_id}-{stamp}.{extension}"


# ==============================================================================
# Coordinator
# ==============================================================================


class MutationCoordinator:
    """Run mutations and refresh the affected view on success."""

    def __init__(
        self,
        store: RecordStore,
        media_store: MediaStore,
        moderation: ModerationStateMachine,
        settings: Settings,
    ) -> None:
        self.store = store
        self.media_store = media_store
        self.moderation = moderation
        self.settings = settings

    async def _run(
        self,
        action: str,
        view: AggregatedListView[Any],
        operation: Callable[[], Awaitable[dict[str, Any]]],
    ) -> ActionResult:
        """Execute ``operation`` then refresh ``view``.

        The operation returns log fields describing what it did.
        """
        try:
            details = await operation()
        except ShowcaseError as e:
            logger.warning("action_failed", action=action, **describe_error(e))
            return ActionResult.failed(e)

        logger.info(action, view=view.name, **details)
        await view.refresh()
        return ActionResult.ok()

    # ==========================================================================
    # Reactions
    # ==========================================================================

    async def toggle_reaction(
        self,
        view: AggregatedListView[Any],
        talent_id: UUID,
        viewer_id: UUID | None,
    ) -> ActionResult:
        """Like or unlike a talent based on the view's last-loaded state."""

        async def operation() -> dict[str, Any]:
            if viewer_id is None:
                raise AuthRequiredError("You must be logged in to like talents")
            item = view.find(talent_id)
            if item is None:
                raise NotFoundError("Talent not found")

            if item.is_liked_by_viewer:
                await self.store.delete(
                    TALENT_LIKES.name, {"talent_id": talent_id, "user_id": viewer_id}
                )
            else:
                await self.store.insert(TALENT_LIKES.name, like_record(talent_id, viewer_id))
            return {"talent_id": str(talent_id), "liked": not item.is_liked_by_viewer}

        return await self._run("reaction_toggled", view, operation)

    # ==========================================================================
    # Talents
    # ==========================================================================

    async def delete_talent(
        self,
        view: AggregatedListView[Any],
        talent_id: UUID,
        confirmed: bool,
    ) -> ActionResult:
        async def operation() -> dict[str, Any]:
            if confirmed is not True:
                raise ValidationFailureError(
                    "Deletion must be confirmed", field="confirm"
                )
            await self.store.delete(TALENTS.name, talent_id)
            return {"talent_id": str(talent_id)}

        return await self._run("talent_deleted", view, operation)

    async def upload_talent(
        self,
        view: AggregatedListView[Any],
        viewer_id: UUID | None,
        draft: TalentDraft,
        media: MediaUpload | None,
    ) -> ActionResult:
        """Upload media then insert the talent record referencing it.

        Size and required fields are checked before any network call.
        """

        async def operation() -> dict[str, Any]:
            if viewer_id is None:
                raise AuthRequiredError("You must be logged in to upload talents")
            if not draft.title or not draft.title.strip():
                raise ValidationFailureError("Title is required", field="title")
            try:
                category = TalentCategory(draft.category)
            except ValueError as e:
                raise ValidationFailureError(
                    f"Unknown category '{draft.category}'", field="category"
                ) from e
            if media is None or not media.content:
                raise ValidationFailureError("A media file is required", field="media")
            if media.size > self.settings.upload_max_file_size:
                raise ValidationFailureError(
                    f"File size must be less than {self.settings.upload_max_file_size_mb}MB",
                    field="media",
                )

            bucket = self.settings.media_bucket
            path = media_path(viewer_id, media.extension)
            try:
                stored_path = await self.media_store.upload(
                    bucket, path, media.content, media.content_type
                )
                media_url = await self.media_store.get_public_url(bucket, stored_path)
            except StorageError as e:
                raise StoreError(e.message, code=e.code, collection=bucket) from e

            talent = create_talent(
                user_id=viewer_id,
                title=draft.title.strip(),
                description=(draft.description or "").strip(),
                category=category,
                media_url=media_url,
                media_type=MediaType.from_mime(media.content_type),
                tags=parse_tags(draft.tags),
            )
            await self.store.insert(TALENTS.name, talent.to_record())
            return {
                "talent_id": str(talent.id),
                "media_type": talent.media_type.value,
                "file_size": media.size,
            }

        return await self._run("talent_uploaded", view, operation)

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def post_comment(
        self,
        thread_view: AggregatedListView[Any],
        talent_id: UUID,
        viewer_id: UUID | None,
        text: str,
    ) -> ActionResult:
        """Append a comment; only the thread view is refreshed."""

        async def operation() -> dict[str, Any]:
            content = (text or "").strip()
            if not content:
                raise ValidationFailureError("Comment cannot be empty", field="content")
            if viewer_id is None:
                raise AuthRequiredError("You must be logged in to comment")
            comment = create_comment(talent_id, viewer_id, content)
            await self.store.insert(TALENT_COMMENTS.name, comment.to_record())
            return {"talent_id": str(talent_id), "comment_id": str(comment.id)}

        return await self._run("comment_posted", thread_view, operation)

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def _stored_actor(self, actor: Actor) -> Actor:
        """Use the actor's stored role; token claims lag behind demotions."""
        rows = await self.store.select_in(PROFILES.name, "id", [actor.id])
        if not rows:
            raise PermissionDeniedError("Actor profile no longer exists")
        return parse_rows(PROFILES.name, rows, Profile.from_row)[0]

    async def update_status(
        self,
        view: AggregatedListView[Any],
        actor: Actor,
        request_id: UUID,
        new_status: str,
    ) -> ActionResult:
        async def operation() -> dict[str, Any]:
            item = view.find(request_id)
            current = item.record.status if item is not None else None
            status = self.moderation.check_status_update(
                await self._stored_actor(actor), current, new_status
            )
            if item is None:
                raise NotFoundError("Service request not found")
            await self.store.update(
                HOSTEL_SERVICES.name,
                request_id,
                {"status": status.value, "updated_at": datetime.now(UTC)},
            )
            return {"request_id": str(request_id), "status": status.value}

        return await self._run("service_status_updated", view, operation)

    async def update_role(
        self,
        view: AggregatedListView[Any],
        actor: Actor,
        profile_id: UUID,
        new_role: str,
    ) -> ActionResult:
        """Set a profile's role unless the moderation rules refuse it."""

        async def operation() -> dict[str, Any]:
            item = view.find(profile_id)
            if item is None:
                raise NotFoundError("User not found")
            role = self.moderation.check_role_update(
                await self._stored_actor(actor), item.record, new_role
            )
            await self.store.update(PROFILES.name, profile_id, {"role": role.value})
            return {"profile_id": str(profile_id), "role": role.value}

        return await self._run("role_updated", view, operation)
