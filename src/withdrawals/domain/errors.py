"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class InvalidTransition(DomainError):
    """Requested operation is not legal from the request's current stage."""

    def __init__(self, request_id: str, action: str, current_stage: str):
        super().__init__(
            f"Cannot {action} request {request_id} from stage '{current_stage}'"
        )
        self.request_id = request_id
        self.action = action
        self.current_stage = current_stage


class PermissionDenied(DomainError):
    """Actor's role or capability does not permit the action."""

    def __init__(self, role: str, action: str, reason: str, required_role: Optional[str] = None):
        super().__init__(reason)
        self.role = role
        self.action = action
        self.reason = reason
        self.required_role = required_role


class ConcurrentModification(DomainError):
    """A write lost a race against another write on the same request."""


class StorageUnavailable(DomainError):
    """Repository did not respond within the bounded wait, or failed."""


def request_not_found(request_id: str) -> str:
    """Return message for missing request."""
    return f"Request {request_id} not found"


def user_not_found(user: str) -> str:
    """Return message for missing user by ID or email."""
    return f"User '{user}' not found"


def duplicate_user(email: str) -> str:
    """Return message for duplicate user email."""
    return f"User with email '{email}' already exists"


def stale_request(request_id: str, expected_version: int) -> str:
    """Return message when a request changed since it was read."""
    return (
        f"Request {request_id} was modified by another operation "
        f"(expected version {expected_version}). Reload it and try again."
    )


def storage_timeout(operation: str, timeout: float) -> str:
    """Return message when storage did not answer in time."""
    return f"Storage did not complete '{operation}' within {timeout:g} seconds"


def missing_fields(fields: list[str]) -> str:
    """Return message for missing required creation fields."""
    return f"Missing required fields: {', '.join(fields)}"
