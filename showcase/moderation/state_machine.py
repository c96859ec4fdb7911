"""Rules for admin moderation of user roles and service request status.

Roles are a direct set over ``{user, admin}``. Two transitions are refused:

- any change to a protected identity (matched by profile id or email,
  case-insensitive)
- an admin revoking their own admin role

Service request statuses are unordered: any admin may set any status.
Moving backwards (e.g. Completed to Pending) is treated as an operator
correction and logged.
"""

from collections.abc import Iterable
from typing import Any, Protocol
from uuid import UUID

import structlog

from showcase.auth.permissions import UserRole, is_admin
from showcase.core.errors import (
    ForbiddenTransitionError,
    PermissionDeniedError,
    ValidationFailureError,
)
from showcase.profiles.models import Profile
from showcase.service_requests.models import STATUS_ORDER, ServiceStatus


logger = structlog.get_logger(__name__)


class Actor(Protocol):
    """Authenticated user performing a moderation action."""

    id: UUID
    role: Any


def parse_role(value: UserRole | str) -> UserRole:
    try:
        return UserRole(value)
    except ValueError as e:
        allowed = ", ".join(r.value for r in UserRole)
        raise ValidationFailureError(
            f"Unknown role '{value}'. Allowed: {allowed}", field="role"
        ) from e


def parse_status(value: ServiceStatus | str) -> ServiceStatus:
    try:
        return ServiceStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in ServiceStatus)
        raise ValidationFailureError(
            f"Unknown status '{value}'. Allowed: {allowed}", field="status"
        ) from e


class ModerationStateMachine:
    """Validate moderation transitions before anything is written."""

    def __init__(self, protected_identities: Iterable[str] = ()) -> None:
        self.protected_identities = frozenset(
            identity.strip().lower() for identity in protected_identities if identity.strip()
        )

    def is_protected(self, profile: Profile) -> bool:
        """Whether the profile matches a configured protected identity."""
        candidates = {str(profile.id).lower(), (profile.email or "").strip().lower()}
        return bool(candidates & self.protected_identities)

    def is_role_locked(self, profile: Profile, actor: Actor | None = None) -> bool:
        """Whether the role control for ``profile`` must be rendered inert."""
        if self.is_protected(profile):
            return True
        return actor is not None and profile.id == actor.id and is_admin(profile.role)

    def require_admin(self, actor: Actor) -> None:
        if not is_admin(actor.role):
            raise PermissionDeniedError("Admin role required")

    def check_role_update(
        self,
        actor: Actor,
        profile: Profile,
        new_role: UserRole | str,
    ) -> UserRole:
        """Validate a role change and return the parsed target role.

        Raises:
            PermissionDeniedError: Actor is not an admin.
            ValidationFailureError: Unknown role value.
            ForbiddenTransitionError: Protected identity or self-demotion.
        """
        self.require_admin(actor)
        role = parse_role(new_role)

        if self.is_protected(profile):
            logger.warning(
                "role_update_refused",
                profile_id=str(profile.id),
                reason="protected_identity",
            )
            raise ForbiddenTransitionError("This user's role cannot be changed")

        if profile.id == actor.id and role != UserRole.ADMIN:
            logger.warning(
                "role_update_refused",
                profile_id=str(profile.id),
                reason="self_demotion",
            )
            raise ForbiddenTransitionError("Admins cannot revoke their own admin role")

        return role

    def check_status_update(
        self,
        actor: Actor,
        current: ServiceStatus | str | None,
        new_status: ServiceStatus | str,
    ) -> ServiceStatus:
        """Validate a status change and return the parsed target status.

        Raises:
            PermissionDeniedError: Actor is not an admin.
            ValidationFailureError: Unknown status value.
        """
        self.require_admin(actor)
        target = parse_status(new_status)

        try:
            previous = ServiceStatus(current) if current is not None else None
        except ValueError:
            previous = None

        if previous is not None and STATUS_ORDER[target] < STATUS_ORDER[previous]:
            logger.info(
                "service_status_regressed",
                from_status=previous.value,
                to_status=target.value,
            )
        return target
