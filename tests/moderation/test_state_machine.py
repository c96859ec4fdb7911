"""Tests for the moderation state machine."""

from uuid import uuid4

import pytest

from conftest import profile_row
from showcase.auth.permissions import UserRole
from showcase.auth.schemas import Viewer
from showcase.core.errors import (
    ForbiddenTransitionError,
    PermissionDeniedError,
    ValidationFailureError,
)
from showcase.moderation.state_machine import ModerationStateMachine
from showcase.profiles.models import Profile
from showcase.service_requests.models import ServiceStatus


@pytest.fixture
def machine() -> ModerationStateMachine:
    return ModerationStateMachine([" Root@Example.com ", ""])


@pytest.fixture
def admin() -> Viewer:
    return Viewer(id=uuid4(), email="priya@example.com", role=UserRole.ADMIN)


def _profile(**kwargs) -> Profile:
    return Profile.from_row(profile_row(**kwargs))


class TestProtectedIdentities:
    def test_email_match_is_case_insensitive(self, machine: ModerationStateMachine) -> None:
        assert machine.is_protected(_profile(full_name="Root", email="ROOT@example.com"))
        assert not machine.is_protected(_profile(full_name="Other"))

    def test_match_by_profile_id(self) -> None:
        profile_id = uuid4()
        machine = ModerationStateMachine([str(profile_id)])

        assert machine.is_protected(_profile(profile_id=profile_id))

    def test_role_locked_for_own_admin_profile(
        self, machine: ModerationStateMachine, admin: Viewer
    ) -> None:
        own = _profile(full_name="Priya", role="admin", profile_id=admin.id)

        assert machine.is_role_locked(own, admin)
        assert not machine.is_role_locked(_profile(full_name="Sam"), admin)


class TestRoleUpdates:
    def test_protected_identity_refused(
        self, machine: ModerationStateMachine, admin: Viewer
    ) -> None:
        root = _profile(full_name="Root", email="root@example.com", role="admin")

        with pytest.raises(ForbiddenTransitionError):
            machine.check_role_update(admin, root, "user")

    def test_self_demotion_refused(
        self, machine: ModerationStateMachine, admin: Viewer
    ) -> None:
        own = _profile(full_name="Priya", role="admin", profile_id=admin.id)

        with pytest.raises(ForbiddenTransitionError):
            machine.check_role_update(admin, own, "user")

    def test_promotion_returns_role(
        self, machine: ModerationStateMachine, admin: Viewer
    ) -> None:
        assert machine.check_role_update(admin, _profile(), "admin") == UserRole.ADMIN

    def test_unknown_role(self, machine: ModerationStateMachine, admin: Viewer) -> None:
        with pytest.raises(ValidationFailureError) as exc_info:
            machine.check_role_update(admin, _profile(), "superuser")

        assert exc_info.value.field == "role"

    def test_non_admin_actor(self, machine: ModerationStateMachine) -> None:
        actor = Viewer(id=uuid4(), role=UserRole.USER)

        with pytest.raises(PermissionDeniedError):
            machine.check_role_update(actor, _profile(), "admin")


class TestStatusUpdates:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            ("Pending", "In Progress"),
            ("In Progress", "Completed"),
            ("Completed", "Pending"),
            (None, "Completed"),
            ("Escalated", "Pending"),
        ],
    )
    def test_any_status_reachable(
        self, machine: ModerationStateMachine, admin: Viewer, current, target
    ) -> None:
        assert machine.check_status_update(admin, current, target) == ServiceStatus(target)

    def test_unknown_status(self, machine: ModerationStateMachine, admin: Viewer) -> None:
        with pytest.raises(ValidationFailureError):
            machine.check_status_update(admin, "Pending", "Closed")

    def test_non_admin_actor(self, machine: ModerationStateMachine) -> None:
        with pytest.raises(PermissionDeniedError):
            machine.check_status_update(Viewer(id=uuid4()), "Pending", "Completed")
