"""FastAPI dependencies shared by the showcase routers.

Provides dependency injection for:
- Aggregation orchestrator, mutation coordinator and moderation rules
- Error code to HTTP status mapping
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from showcase.aggregation.orchestrator import AggregationOrchestrator
from showcase.aggregation.views import ErrorDescriptor
from showcase.moderation.state_machine import ModerationStateMachine
from showcase.mutations.coordinator import MutationCoordinator


def _app_service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not available",
        )
    return service


async def get_orchestrator(request: Request) -> AggregationOrchestrator:
    """Get the aggregation orchestrator from app state."""
    return _app_service(request, "orchestrator")


async def get_coordinator(request: Request) -> MutationCoordinator:
    """Get the mutation coordinator from app state."""
    return _app_service(request, "coordinator")


async def get_moderation(request: Request) -> ModerationStateMachine:
    """Get the moderation state machine from app state."""
    return _app_service(request, "moderation")


# Type aliases for dependency injection
OrchestratorDep = Annotated[AggregationOrchestrator, Depends(get_orchestrator)]
CoordinatorDep = Annotated[MutationCoordinator, Depends(get_coordinator)]
ModerationDep = Annotated[ModerationStateMachine, Depends(get_moderation)]


ERROR_STATUS = {
    "auth_required": status.HTTP_401_UNAUTHORIZED,
    "permission_denied": status.HTTP_403_FORBIDDEN,
    "forbidden_transition": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "validation_failure": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def error_status(error: ErrorDescriptor | None, success_status: int = status.HTTP_200_OK) -> int:
    """HTTP status for an error descriptor; store failures map to 503."""
    if error is None:
        return success_status
    return ERROR_STATUS.get(error.code, status.HTTP_503_SERVICE_UNAVAILABLE)


def json_response(
    body: BaseModel,
    error: ErrorDescriptor | None,
    success_status: int = status.HTTP_200_OK,
) -> ORJSONResponse:
    """Render ``body`` with the status code matching ``error``."""
    return ORJSONResponse(
        status_code=error_status(error, success_status),
        content=body.model_dump(mode="json"),
    )
