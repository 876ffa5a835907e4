"""Tests for the permission authority."""

import pytest

from withdrawals.domain.entities import ActionType, User, UserRole
from withdrawals.domain.errors import PermissionDenied
from withdrawals.domain.permissions import (
    ROLE_PERMISSIONS,
    action_display_name,
    can_perform_action,
    map_user_role,
    require_permission,
    required_role_for,
)


def make_user(role: UserRole, **flags) -> User:
    return User(id="u1", name="Test User", email="test@example.com", role=role, **flags)


class TestRolePermissions:
    """Role-only decisions for approve, reject, disburse and view."""

    @pytest.mark.parametrize("action", list(ActionType))
    def test_admin_always_allowed(self, action):
        check = can_perform_action(make_user(UserRole.ADMIN), action)
        assert check.can_perform is True
        assert check.reason is None

    def test_operations_cannot_disburse(self):
        check = can_perform_action(make_user(UserRole.OPERATIONS_TEAM), ActionType.DISBURSE)
        assert check.can_perform is False
        assert "Core Banking Team" in check.reason

    @pytest.mark.parametrize("action", [ActionType.APPROVE, ActionType.REJECT])
    def test_operations_can_approve_and_reject(self, action):
        assert can_perform_action(make_user(UserRole.OPERATIONS_TEAM), action).can_perform

    def test_core_banking_can_disburse_only(self):
        user = make_user(UserRole.CORE_BANKING_TEAM)
        assert can_perform_action(user, ActionType.DISBURSE).can_perform
        assert not can_perform_action(user, ActionType.APPROVE).can_perform
        assert not can_perform_action(user, ActionType.REJECT).can_perform

    @pytest.mark.parametrize(
        "role", [UserRole.ARCHIVE_TEAM, UserRole.LOAN_ADMIN, UserRole.OBSERVER]
    )
    def test_view_only_roles(self, role):
        user = make_user(role)
        assert can_perform_action(user, ActionType.VIEW).can_perform
        for action in (ActionType.APPROVE, ActionType.REJECT, ActionType.DISBURSE):
            assert not can_perform_action(user, action).can_perform

    def test_every_role_can_view(self):
        for role in UserRole:
            assert ActionType.VIEW in ROLE_PERMISSIONS[role]

    def test_denial_reason_names_required_role(self):
        check = can_perform_action(make_user(UserRole.ARCHIVE_TEAM), ActionType.APPROVE)
        assert check.reason == "Archive Team cannot approve requests. Requires Operations Team."

    def test_request_is_not_consulted(self, sample_request):
        user = make_user(UserRole.OPERATIONS_TEAM)
        with_request = can_perform_action(user, ActionType.APPROVE, sample_request)
        without_request = can_perform_action(user, ActionType.APPROVE)
        assert with_request == without_request


class TestCapabilities:
    """Intake capability and view-only flag."""

    @pytest.mark.parametrize("action", [ActionType.CREATE, ActionType.SUBMIT])
    def test_intake_requires_capability(self, action):
        assert not can_perform_action(make_user(UserRole.ARCHIVE_TEAM), action).can_perform
        assert can_perform_action(
            make_user(UserRole.ARCHIVE_TEAM, can_create_requests=True), action
        ).can_perform

    def test_intake_reason(self):
        check = can_perform_action(make_user(UserRole.OBSERVER), ActionType.CREATE)
        assert "Archive Team (request intake capability)" in check.reason

    def test_view_only_blocks_role_actions(self):
        user = make_user(UserRole.OPERATIONS_TEAM, view_only_access=True)
        check = can_perform_action(user, ActionType.APPROVE)
        assert check.can_perform is False
        assert check.reason == "View-only access cannot approve requests"
        assert can_perform_action(user, ActionType.VIEW).can_perform

    def test_view_only_blocks_capability_actions(self):
        user = make_user(UserRole.ARCHIVE_TEAM, can_create_requests=True, view_only_access=True)
        assert not can_perform_action(user, ActionType.CREATE).can_perform

    def test_view_only_does_not_restrict_admin(self):
        user = make_user(UserRole.ADMIN, view_only_access=True)
        assert can_perform_action(user, ActionType.DISBURSE).can_perform

    def test_informational_flags_grant_nothing(self):
        user = make_user(UserRole.ARCHIVE_TEAM, can_approve_reject=True, can_disburse=True)
        assert not can_perform_action(user, ActionType.APPROVE).can_perform
        assert not can_perform_action(user, ActionType.DISBURSE).can_perform


class TestRequirePermission:
    def test_raises_with_details(self):
        with pytest.raises(PermissionDenied) as exc_info:
            require_permission(make_user(UserRole.ARCHIVE_TEAM), ActionType.DISBURSE)
        error = exc_info.value
        assert error.role == "archive_team"
        assert error.action == "disburse"
        assert error.required_role == "Core Banking Team"
        assert str(error) == error.reason

    def test_allowed_returns_none(self):
        assert require_permission(make_user(UserRole.CORE_BANKING_TEAM), ActionType.DISBURSE) is None

    def test_denial_is_logged(self, caplog):
        with caplog.at_level("WARNING", logger="withdrawals"):
            with pytest.raises(PermissionDenied):
                require_permission(make_user(UserRole.OBSERVER), ActionType.APPROVE)
        assert "Permission denied" in caplog.text


class TestRoleMapping:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("operations_team", UserRole.OPERATIONS_TEAM),
            ("ADMIN", UserRole.ADMIN),
            ("regional_operations", UserRole.OPERATIONS_TEAM),
            ("head_of_operations", UserRole.OPERATIONS_TEAM),
            ("core_banking", UserRole.CORE_BANKING_TEAM),
            ("loan_administrator", UserRole.LOAN_ADMIN),
        ],
    )
    def test_known_roles(self, raw, expected):
        assert map_user_role(raw) == expected

    def test_unknown_role_falls_back_to_loan_admin(self, caplog):
        with caplog.at_level("WARNING", logger="withdrawals"):
            assert map_user_role("janitor") == UserRole.LOAN_ADMIN
        assert "janitor" in caplog.text

    def test_display_names(self):
        assert action_display_name(ActionType.DISBURSE) == "disburse requests"
        assert required_role_for(ActionType.APPROVE) == "Operations Team"
        assert required_role_for(ActionType.VIEW) == "Administrator"
