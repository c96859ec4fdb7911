"""Talent feed API endpoints.

Provides routes for:
- Feed view (sorted, filtered, personalized)
- Talent upload (multipart)
- Like toggle
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, File, Form, Query, UploadFile, status
from fastapi.responses import ORJSONResponse

from showcase.aggregation.schemas import ActionResponse, ViewResponse, action_response, view_response
from showcase.auth.dependencies import OptionalViewer
from showcase.core.dependencies import CoordinatorDep, OrchestratorDep, json_response
from showcase.mutations.coordinator import MediaUpload, TalentDraft

from .models import SortKey, TalentCategory
from .schemas import TalentResponse


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/talents", tags=["talents"])

SortQuery = Annotated[str, Query(description="created_at or likes_count")]
FilterQuery = Annotated[str, Query(description="Matches title, description or tags")]


@router.get(
    "",
    response_model=ViewResponse[TalentResponse],
    summary="Talent feed",
)
async def get_feed(
    orchestrator: OrchestratorDep,
    viewer: OptionalViewer,
    sort: SortQuery = SortKey.CREATED_AT.value,
    q: FilterQuery = "",
) -> ORJSONResponse:
    """Feed of every talent with owner profile and the viewer's liked state."""
    view = orchestrator.talent_feed(sort, viewer.id if viewer else None, q)
    await view.refresh()
    return json_response(view_response(TalentResponse, view), view.last_error)


@router.post(
    "",
    response_model=ActionResponse[TalentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload talent",
)
async def upload_talent(
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    viewer: OptionalViewer,
    title: Annotated[str, Form(max_length=200)] = "",
    description: Annotated[str, Form(max_length=5000)] = "",
    category: Annotated[str, Form()] = TalentCategory.OTHER.value,
    tags: Annotated[str, Form(description="Comma-separated tags")] = "",
    media: Annotated[UploadFile | None, File(description="Image or video")] = None,
) -> ORJSONResponse:
    """Upload a media file and create the talent referencing it."""
    viewer_id = viewer.id if viewer else None
    upload = None
    if media is not None:
        upload = MediaUpload(
            filename=media.filename or "",
            content_type=media.content_type or "application/octet-stream",
            content=await media.read(),
        )

    view = orchestrator.talent_feed(SortKey.CREATED_AT, viewer_id)
    result = await coordinator.upload_talent(
        view,
        viewer_id,
        TalentDraft(title=title, description=description, category=category, tags=tags),
        upload,
    )
    return json_response(
        action_response(TalentResponse, view, result.success, result.error),
        result.error,
        status.HTTP_201_CREATED,
    )


@router.post(
    "/{talent_id}/like",
    response_model=ActionResponse[TalentResponse],
    summary="Toggle like",
)
async def toggle_like(
    talent_id: UUID,
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    viewer: OptionalViewer,
    sort: SortQuery = SortKey.CREATED_AT.value,
    q: FilterQuery = "",
) -> ORJSONResponse:
    """Like the talent if the viewer has not, unlike it otherwise."""
    viewer_id = viewer.id if viewer else None
    view = orchestrator.talent_feed(sort, viewer_id, q)
    if viewer_id is not None and not await view.refresh():
        return json_response(view_response(TalentResponse, view), view.last_error)

    result = await coordinator.toggle_reaction(view, talent_id, viewer_id)
    return json_response(
        action_response(TalentResponse, view, result.success, result.error),
        result.error,
    )
