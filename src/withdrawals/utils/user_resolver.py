"""Utility for resolving user identifiers."""

from withdrawals.domain.entities import User
from withdrawals.domain.errors import NotFoundError, user_not_found
from withdrawals.domain.users import UserService


def resolve_user(user_service: UserService, user: str) -> User:
    """Resolve a user ID or email to a user.

    Args:
        user_service: UserService instance
        user: User ID or email address

    Returns:
        User entity

    Raises:
        NotFoundError: If user is not found
    """
    identifier = (user or "").strip()

    if "@" in identifier:
        found = user_service.get_user_by_email(identifier)
    else:
        found = user_service.get_user(identifier)

    if found is None:
        raise NotFoundError(user_not_found(identifier))
    return found
