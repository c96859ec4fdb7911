"""Admin moderation API endpoints.

Provides routes for:
- Talent moderation (list, delete with confirmation)
- User directory and role updates
- Hostel service requests and status updates

Every route requires the ADMIN role.
"""

from functools import partial
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import APIRouter, Query
from fastapi.responses import ORJSONResponse

from showcase.aggregation.schemas import ActionResponse, ViewResponse, action_response, view_response
from showcase.aggregation.views import AggregatedView
from showcase.auth.dependencies import AdminViewer
from showcase.auth.schemas import Viewer
from showcase.core.dependencies import (
    CoordinatorDep,
    ModerationDep,
    OrchestratorDep,
    json_response,
)
from showcase.moderation.state_machine import ModerationStateMachine
from showcase.profiles.models import Profile
from showcase.talents.schemas import TalentResponse

from .schemas import (
    ServiceRequestResponse,
    UpdateRoleRequest,
    UpdateStatusRequest,
    UserResponse,
)


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/admin", tags=["admin"])


def _user_item(
    moderation: ModerationStateMachine,
    admin: Viewer,
    view: AggregatedView[Profile],
) -> UserResponse:
    return UserResponse.from_profile(
        view.record, moderation.is_role_locked(view.record, admin)
    )


# ==============================================================================
# Talents
# ==============================================================================


@router.get(
    "/talents",
    response_model=ViewResponse[TalentResponse],
    summary="All talents",
)
async def list_talents(
    orchestrator: OrchestratorDep,
    admin: AdminViewer,
) -> ORJSONResponse:
    view = orchestrator.admin_talents()
    await view.refresh()
    return json_response(view_response(TalentResponse, view), view.last_error)


@router.delete(
    "/talents/{talent_id}",
    response_model=ActionResponse[TalentResponse],
    summary="Delete talent",
)
async def delete_talent(
    talent_id: UUID,
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    admin: AdminViewer,
    confirm: Annotated[bool, Query(description="Operator confirmation")] = False,
) -> ORJSONResponse:
    """Delete a talent. Refused unless ``confirm=true``."""
    view = orchestrator.admin_talents()
    result = await coordinator.delete_talent(view, talent_id, confirm)
    return json_response(
        action_response(TalentResponse, view, result.success, result.error),
        result.error,
    )


# ==============================================================================
# Users
# ==============================================================================


@router.get(
    "/users",
    response_model=ViewResponse[UserResponse],
    summary="User directory",
)
async def list_users(
    orchestrator: OrchestratorDep,
    moderation: ModerationDep,
    admin: AdminViewer,
    q: Annotated[str, Query(description="Matches name or email")] = "",
) -> ORJSONResponse:
    view = orchestrator.user_directory(q)
    await view.refresh()
    return json_response(
        view_response(UserResponse, view, partial(_user_item, moderation, admin)),
        view.last_error,
    )


@router.patch(
    "/users/{profile_id}/role",
    response_model=ActionResponse[UserResponse],
    summary="Update user role",
)
async def update_role(
    profile_id: UUID,
    data: UpdateRoleRequest,
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    moderation: ModerationDep,
    admin: AdminViewer,
) -> ORJSONResponse:
    """Set a user's role. Protected identities and self-demotion are refused."""
    view = orchestrator.user_directory()
    if not await view.refresh():
        return json_response(
            view_response(UserResponse, view, partial(_user_item, moderation, admin)),
            view.last_error,
        )

    result = await coordinator.update_role(view, admin, profile_id, data.role)
    return json_response(
        action_response(
            UserResponse,
            view,
            result.success,
            result.error,
            partial(_user_item, moderation, admin),
        ),
        result.error,
    )


# ==============================================================================
# Service requests
# ==============================================================================


@router.get(
    "/services",
    response_model=ViewResponse[ServiceRequestResponse],
    summary="Service requests",
)
async def list_service_requests(
    orchestrator: OrchestratorDep,
    admin: AdminViewer,
) -> ORJSONResponse:
    view = orchestrator.service_requests()
    await view.refresh()
    return json_response(view_response(ServiceRequestResponse, view), view.last_error)


@router.patch(
    "/services/{request_id}/status",
    response_model=ActionResponse[ServiceRequestResponse],
    summary="Update service request status",
)
async def update_status(
    request_id: UUID,
    data: UpdateStatusRequest,
    orchestrator: OrchestratorDep,
    coordinator: CoordinatorDep,
    admin: AdminViewer,
) -> ORJSONResponse:
    """Set any status directly; regressions are allowed and logged."""
    view = orchestrator.service_requests()
    if not await view.refresh():
        return json_response(
            view_response(ServiceRequestResponse, view), view.last_error
        )

    result = await coordinator.update_status(view, admin, request_id, data.status)
    return json_response(
        action_response(ServiceRequestResponse, view, result.success, result.error),
        result.error,
    )
