"""
Tests for the role permission table.
"""

from fitandflex.core.permissions import (
    POLICY,
    Action,
    Resource,
    RoleName,
    is_admin,
    is_authorized,
    parse_role,
)


class TestIsAuthorized:
    """Pure lookups against the policy table."""

    def test_super_admin_can_manage_branches(self):
        """Only the super admin creates branches."""
        assert is_authorized(RoleName.SUPER_ADMIN, Resource.BRANCH, Action.CREATE)
        assert not is_authorized(RoleName.BRANCH_ADMIN, Resource.BRANCH, Action.CREATE)
        assert not is_authorized(RoleName.USER, Resource.BRANCH, Action.CREATE)

    def test_members_book_but_do_not_manage(self):
        """Members create and cancel reservations but cannot mark attendance."""
        assert is_authorized(RoleName.USER, Resource.RESERVATION, Action.CREATE)
        assert is_authorized(RoleName.USER, Resource.RESERVATION, Action.CANCEL)
        assert not is_authorized(RoleName.USER, Resource.RESERVATION, Action.MANAGE)

    def test_instructor_manages_attendance(self):
        """Instructors follow attendance without booking for themselves."""
        assert is_authorized(RoleName.INSTRUCTOR, Resource.RESERVATION, Action.MANAGE)
        assert not is_authorized(RoleName.INSTRUCTOR, Resource.RESERVATION, Action.CREATE)

    def test_refunds_are_admin_only(self):
        """Payment lifecycle actions need an admin role."""
        assert is_authorized(RoleName.BRANCH_ADMIN, Resource.PAYMENT, Action.MANAGE)
        assert not is_authorized(RoleName.USER, Resource.PAYMENT, Action.MANAGE)
        assert not is_authorized(RoleName.INSTRUCTOR, Resource.PAYMENT, Action.MANAGE)

    def test_role_given_as_string(self):
        """Role names coming from token claims are accepted case-insensitively."""
        assert is_authorized("super_admin", Resource.MEMBERSHIP, Action.DELETE)
        assert not is_authorized("user", Resource.MEMBERSHIP, Action.DELETE)

    def test_unknown_or_missing_role_is_denied(self):
        """Anything outside the four roles gets nothing."""
        assert not is_authorized(None, Resource.BRANCH, Action.READ)
        assert not is_authorized("JANITOR", Resource.BRANCH, Action.READ)

    def test_unlisted_permission_is_denied(self):
        """Pairs absent from the table are refused for everyone."""
        assert (Resource.ROLE, Action.DELETE) not in POLICY
        assert not is_authorized(RoleName.SUPER_ADMIN, Resource.ROLE, Action.DELETE)


class TestRoleHelpers:
    """Role parsing and admin detection."""

    def test_parse_role(self):
        assert parse_role("branch_admin") is RoleName.BRANCH_ADMIN
        assert parse_role("nope") is None
        assert parse_role(None) is None

    def test_is_admin(self):
        assert is_admin(RoleName.SUPER_ADMIN)
        assert is_admin("BRANCH_ADMIN")
        assert not is_admin(RoleName.INSTRUCTOR)
        assert not is_admin(None)
