"""Comment thread API endpoints."""

from uuid import UUID

import structlog
from fastapi import APIRouter, status
from fastapi.responses import ORJSONResponse

from showcase.aggregation.schemas import ActionResponse, ViewResponse, action_response, view_response
from showcase.auth.dependencies import OptionalViewer
from showcase.core.dependencies import CoordinatorDep, OrchestratorDep, json_response

from .schemas import CommentResponse, CreateCommentRequest


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/talents/{talent_id}/comments", tags=["comments"])


@router.get(
    "",
    response_model=ViewResponse[CommentResponse],
    summary="Comment thread",
)
async def get_thread(
    talent_id: UUID,
    orchestrator: OrchestratorDep,
) -> ORJSONResponse:
    """Comments of a talent, oldest first, with author profiles."""
    view = orchestrator.comment_thread(talent_id)
    await view.refresh()
    return json_response(view_response(CommentResponse, view), view.last_error)


@router.post(
    "",
    response_model=ActionResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Post comment",
)
async def post_comment(
    talent_id: UUID,
    data: CreateCommentRequest,
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    viewer: OptionalViewer,
) -> ORJSONResponse:
    """Append a comment and return the refreshed thread."""
    view = orchestrator.comment_thread(talent_id)
    result = await coordinator.post_comment(
        view, talent_id, viewer.id if viewer else None, data.content
    )
    return json_response(
        action_response(CommentResponse, view, result.success, result.error),
        result.error,
        status.HTTP_201_CREATED,
    )
