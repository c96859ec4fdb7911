"""Tests for auth permissions."""

import pytest

from showcase.auth.permissions import (
    ROLE_HIERARCHY,
    UserRole,
    get_role_level,
    has_permission,
    is_admin,
)


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_values(self) -> None:
        assert UserRole.USER.value == "user"
        assert UserRole.ADMIN.value == "admin"

    def test_all_roles_have_levels(self) -> None:
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestGetRoleLevel:
    """Tests for get_role_level function."""

    @pytest.mark.parametrize(
        "role,expected_level",
        [
            (UserRole.USER, 0),
            (UserRole.ADMIN, 1),
            ("user", 0),
            ("admin", 1),
        ],
    )
    def test_known_roles(self, role: UserRole | str, expected_level: int) -> None:
        assert get_role_level(role) == expected_level

    def test_invalid_role_returns_zero(self) -> None:
        assert get_role_level("invalid") == 0
        assert get_role_level("superadmin") == 0


class TestHasPermission:
    """Tests for has_permission and is_admin."""

    def test_admin_has_user_permissions(self) -> None:
        assert has_permission(UserRole.ADMIN, UserRole.USER) is True
        assert has_permission(UserRole.ADMIN, UserRole.ADMIN) is True

    def test_user_lacks_admin_permissions(self) -> None:
        assert has_permission(UserRole.USER, UserRole.ADMIN) is False
        assert has_permission("user", "admin") is False

    def test_is_admin(self) -> None:
        assert is_admin(UserRole.ADMIN) is True
        assert is_admin("admin") is True
        assert is_admin(UserRole.USER) is False
        assert is_admin("root") is False
