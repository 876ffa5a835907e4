"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from withdrawals.domain.entities import (
    RequestComment,
    TimelineEvent,
    User,
    WithdrawalRequest,
)


class Database(ABC):
    """Abstract request repository for the withdrawal workflow.

    Every write that pairs a record with a timeline event must be atomic:
    either both become visible or neither does. Implementations raise
    ``StorageUnavailable`` when the backend fails or does not answer within
    their bounded wait, and ``ConcurrentModification`` when a versioned
    update finds a newer version than expected.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # User operations
    @abstractmethod
    def create_user(self, user: User) -> None:
        """Store a user."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List all users ordered by name."""
        pass

    # Request operations
    @abstractmethod
    def create_request(self, request: WithdrawalRequest, event: TimelineEvent) -> WithdrawalRequest:
        """Store a new request together with its creation event."""
        pass

    @abstractmethod
    def get_request(self, request_id: str) -> Optional[WithdrawalRequest]:
        """Get request by ID."""
        pass

    @abstractmethod
    def list_requests(self) -> list[WithdrawalRequest]:
        """List all requests, newest first."""
        pass

    @abstractmethod
    def search_requests(self, term: str) -> list[WithdrawalRequest]:
        """Case-insensitive substring search.

        Matches reference number, project number, beneficiary and country.
        """
        pass

    @abstractmethod
    def update_request(
        self,
        request_id: str,
        expected_version: int,
        changes: dict[str, Any],
        event: TimelineEvent,
    ) -> Optional[WithdrawalRequest]:
        """Apply field changes and append an event as one unit.

        Args:
            request_id: Request ID
            expected_version: Version the caller read; the update only
                applies if the stored version still matches
            changes: Field name -> new value (domain field names)
            event: Timeline event describing the change

        Returns:
            Updated request (with bumped version), or None if not found

        Raises:
            ConcurrentModification: If the stored version differs
        """
        pass

    # Timeline operations
    @abstractmethod
    def add_event(self, event: TimelineEvent) -> None:
        """Append a standalone timeline event."""
        pass

    @abstractmethod
    def list_events(self, request_id: str) -> list[TimelineEvent]:
        """List events of a request in chronological order."""
        pass

    # Comment operations
    @abstractmethod
    def add_comment(self, comment: RequestComment, event: TimelineEvent) -> None:
        """Store a comment together with its timeline event."""
        pass

    @abstractmethod
    def list_comments(self, request_id: str) -> list[RequestComment]:
        """List comments of a request in creation order."""
        pass
