"""User domain service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from withdrawals.domain.entities import User, UserRole
from withdrawals.domain.errors import ValidationError, duplicate_user
from withdrawals.domain.identifiers import IdGenerator
from withdrawals.domain.permissions import map_user_role

if TYPE_CHECKING:
    from withdrawals.database.base import Database


class UserService:
    """Service for managing workflow users."""

    def __init__(self, db: Database, id_generator: Optional[IdGenerator] = None):
        """Initialize user service.

        Args:
            db: Database instance
            id_generator: Identifier strategy for new users
        """
        self.db = db
        self.id_generator = id_generator or IdGenerator()

    def create_user(
        self,
        name: str,
        email: str,
        role: UserRole | str,
        can_create_requests: bool = False,
        can_approve_reject: bool = False,
        can_disburse: bool = False,
        view_only_access: bool = False,
    ) -> User:
        """Create a user.

        Args:
            name: Display name
            email: Email address (unique, case-insensitive)
            role: Workflow role, or a directory role name mapped onto one
            can_create_requests: Intake capability
            can_approve_reject: Informational capability flag
            can_disburse: Informational capability flag
            view_only_access: Restrict the user to viewing

        Returns:
            Created user

        Raises:
            ValidationError: If name or email is invalid or email already exists
        """
        if not name or not name.strip():
            raise ValidationError("User name is required")
        email = (email or "").strip()
        if "@" not in email:
            raise ValidationError(f"Invalid email address '{email}'")
        if self.db.get_user_by_email(email) is not None:
            raise ValidationError(duplicate_user(email))

        user = User(
            id=self.id_generator.new_id(),
            name=name.strip(),
            email=email,
            role=role if isinstance(role, UserRole) else map_user_role(role),
            can_create_requests=can_create_requests,
            can_approve_reject=can_approve_reject,
            can_disburse=can_disburse,
            view_only_access=view_only_access,
        )
        self.db.create_user(user)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self.db.get_user_by_email(email)

    def list_users(self) -> list[User]:
        """List all users."""
        return self.db.list_users()
