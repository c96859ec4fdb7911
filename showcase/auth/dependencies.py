"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Viewer extraction from the bearer JWT (optional for feed reads)
- Required viewer for mutations
- Admin-only endpoints
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import ValidationError

from showcase.auth.permissions import UserRole, has_permission
from showcase.auth.schemas import Viewer
from showcase.auth.security import decode_access_token
from showcase.core.context import set_viewer_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _viewer_from_token(token: str) -> Viewer:
    payload = decode_access_token(token)
    try:
        viewer = Viewer.from_claims(payload)
    except (KeyError, ValidationError) as e:
        msg = "Malformed token claims"
        raise JWTError(msg) from e

    # Set viewer_id in context for logging
    set_viewer_id(viewer.id)
    return viewer


async def get_current_viewer(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Viewer:
    """Get the authenticated viewer.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in to do that",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return _viewer_from_token(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_optional_viewer(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Viewer | None:
    """Get the viewer if authenticated, None otherwise.

    Invalid tokens are treated as anonymous; mutation endpoints still report
    ``auth_required`` through the coordinator.
    """
    if not token:
        return None

    try:
        return _viewer_from_token(token)
    except JWTError:
        return None


async def require_admin(
    viewer: Annotated[Viewer, Depends(get_current_viewer)],
) -> Viewer:
    """Require the ADMIN role."""
    if not has_permission(viewer.role, UserRole.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return viewer


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

CurrentViewer = Annotated[Viewer, Depends(get_current_viewer)]
OptionalViewer = Annotated[Viewer | None, Depends(get_optional_viewer)]
AdminViewer = Annotated[Viewer, Depends(require_admin)]
