"""Permission authority: who may invoke which workflow action.

The decision is a pure function of the user and the action. The request is
accepted for interface stability but never consulted: permission is
role-based, not stage- or ownership-dependent.
"""

import logging
from typing import Optional

from withdrawals.domain.entities import (
    ActionType,
    PermissionCheck,
    User,
    UserRole,
    WithdrawalRequest,
)
from withdrawals.domain.errors import PermissionDenied

logger = logging.getLogger(__name__)


ROLE_PERMISSIONS: dict[UserRole, frozenset[ActionType]] = {
    UserRole.ARCHIVE_TEAM: frozenset({ActionType.VIEW}),
    UserRole.OPERATIONS_TEAM: frozenset(
        {ActionType.APPROVE, ActionType.REJECT, ActionType.VIEW}
    ),
    UserRole.CORE_BANKING_TEAM: frozenset({ActionType.DISBURSE, ActionType.VIEW}),
    UserRole.LOAN_ADMIN: frozenset({ActionType.VIEW}),
    UserRole.ADMIN: frozenset(
        {ActionType.APPROVE, ActionType.REJECT, ActionType.DISBURSE, ActionType.VIEW}
    ),
    UserRole.OBSERVER: frozenset({ActionType.VIEW}),
}

# Intake actions are gated by the can_create_requests capability, not the role map.
CAPABILITY_ACTIONS = frozenset({ActionType.CREATE, ActionType.SUBMIT})

REQUIRED_ROLE: dict[ActionType, str] = {
    ActionType.APPROVE: "Operations Team",
    ActionType.REJECT: "Operations Team",
    ActionType.DISBURSE: "Core Banking Team",
}
DEFAULT_REQUIRED_ROLE = "Administrator"
INTAKE_REQUIREMENT = "Archive Team (request intake capability)"

ACTION_DISPLAY_NAMES: dict[ActionType, str] = {
    ActionType.APPROVE: "approve requests",
    ActionType.REJECT: "reject requests",
    ActionType.DISBURSE: "disburse requests",
    ActionType.VIEW: "view requests",
    ActionType.CREATE: "create requests",
    ActionType.SUBMIT: "submit requests for review",
}

ROLE_DISPLAY_NAMES: dict[UserRole, str] = {
    UserRole.ARCHIVE_TEAM: "Archive Team",
    UserRole.OPERATIONS_TEAM: "Operations Team",
    UserRole.CORE_BANKING_TEAM: "Core Banking Team",
    UserRole.LOAN_ADMIN: "Loan Administrator",
    UserRole.ADMIN: "Administrator",
    UserRole.OBSERVER: "Observer",
}

# Directory role names that differ from the workflow roles.
ROLE_ALIASES: dict[str, UserRole] = {
    "regional_operations": UserRole.OPERATIONS_TEAM,
    "head_of_operations": UserRole.OPERATIONS_TEAM,
    "core_banking": UserRole.CORE_BANKING_TEAM,
    "loan_administrator": UserRole.LOAN_ADMIN,
}


def map_user_role(raw_role: str) -> UserRole:
    """Map a directory role name to a workflow role.

    Unknown names fall back to the view-only loan admin role.

    Args:
        raw_role: Role name as stored by the user directory

    Returns:
        Workflow role
    """
    normalized = (raw_role or "").strip().lower()
    try:
        return UserRole(normalized)
    except ValueError:
        pass
    if normalized in ROLE_ALIASES:
        return ROLE_ALIASES[normalized]
    logger.warning("Unknown role %r, defaulting to %s", raw_role, UserRole.LOAN_ADMIN.value)
    return UserRole.LOAN_ADMIN


def required_role_for(action: ActionType) -> str:
    """Return the human-readable role required for an action."""
    if action in CAPABILITY_ACTIONS:
        return INTAKE_REQUIREMENT
    return REQUIRED_ROLE.get(action, DEFAULT_REQUIRED_ROLE)


def action_display_name(action: ActionType) -> str:
    """Return user-friendly action name (e.g. 'approve requests')."""
    return ACTION_DISPLAY_NAMES.get(action, action.value.replace("_", " "))


def can_perform_action(
    user: User, action: ActionType, request: Optional[WithdrawalRequest] = None
) -> PermissionCheck:
    """Decide whether a user may perform an action.

    Args:
        user: Acting user
        action: Attempted action
        request: Target request (not consulted)

    Returns:
        PermissionCheck with a reason naming the required role when denied
    """
    if user.role == UserRole.ADMIN:
        return PermissionCheck(can_perform=True)

    if user.view_only_access and action != ActionType.VIEW:
        return PermissionCheck(
            can_perform=False,
            reason=f"View-only access cannot {action_display_name(action)}",
        )

    if action in CAPABILITY_ACTIONS:
        if user.can_create_requests:
            return PermissionCheck(can_perform=True)
    elif action in ROLE_PERMISSIONS.get(user.role, frozenset()):
        return PermissionCheck(can_perform=True)

    role_name = ROLE_DISPLAY_NAMES.get(user.role, user.role.value)
    return PermissionCheck(
        can_perform=False,
        reason=(
            f"{role_name} cannot {action_display_name(action)}. "
            f"Requires {required_role_for(action)}."
        ),
    )


def require_permission(
    user: User, action: ActionType, request: Optional[WithdrawalRequest] = None
) -> None:
    """Raise PermissionDenied unless the user may perform the action."""
    check = can_perform_action(user, action, request)
    if not check.can_perform:
        logger.warning(
            "Permission denied: user %s (%s) attempted %s",
            user.id,
            user.role.value,
            action.value,
        )
        raise PermissionDenied(
            role=user.role.value,
            action=action.value,
            reason=check.reason or "",
            required_role=required_role_for(action),
        )
