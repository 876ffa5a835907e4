"""In-memory database implementation.

There is no transactional primitive here, so every mutation of a request
is serialized through a lock owned by that request id. Operations on
different requests never wait on each other.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator, Optional

from withdrawals.database.base import Database
from withdrawals.domain.entities import (
    RequestComment,
    TimelineEvent,
    User,
    WithdrawalRequest,
)
from withdrawals.domain.errors import (
    ConcurrentModification,
    StorageUnavailable,
    ValidationError,
    duplicate_user,
    stale_request,
    storage_timeout,
)
from withdrawals.domain.write_gate import enter_write

DEFAULT_LOCK_TIMEOUT = 5.0


class RequestLocks:
    """Registry of one lock per request id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


class InMemoryDatabase(Database):
    """Dictionary-backed implementation of Database interface."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = DEFAULT_LOCK_TIMEOUT if timeout is None else timeout
        self._locks = RequestLocks()
        self._users: dict[str, User] = {}
        self._requests: dict[str, WithdrawalRequest] = {}
        self._events: dict[str, list[TimelineEvent]] = {}
        self._comments: dict[str, list[RequestComment]] = {}

    @contextmanager
    def _owner(self, key: str, operation: str) -> Iterator[None]:
        """Hold the lock owning ``key`` for the duration of an operation."""
        lock = self._locks.lock_for(key)
        if not lock.acquire(timeout=self.timeout):
            raise StorageUnavailable(storage_timeout(operation, self.timeout))
        try:
            enter_write(operation)
            yield
        finally:
            lock.release()

    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass

    def initialize_schema(self) -> None:
        pass

    # User operations
    def create_user(self, user: User) -> None:
        with self._owner("users", "create_user"):
            if self._find_user_by_email(user.email) is not None or user.id in self._users:
                raise ValidationError(duplicate_user(user.email))
            self._users[user.id] = user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def _find_user_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._find_user_by_email(email)

    def list_users(self) -> list[User]:
        return sorted(self._users.values(), key=lambda user: user.name)

    # Request operations
    def create_request(self, request: WithdrawalRequest, event: TimelineEvent) -> WithdrawalRequest:
        with self._owner(request.id, "create_request"):
            if request.id in self._requests:
                raise ValidationError(f"Request {request.id} already exists")
            self._requests[request.id] = request
            self._events[request.id] = [event]
            self._comments[request.id] = []
        return request

    def get_request(self, request_id: str) -> Optional[WithdrawalRequest]:
        return self._requests.get(request_id)

    def list_requests(self) -> list[WithdrawalRequest]:
        # Snapshot first so concurrent writers never disturb iteration
        snapshot = list(self._requests.values())
        return sorted(snapshot, key=lambda req: req.created_at, reverse=True)

    def search_requests(self, term: str) -> list[WithdrawalRequest]:
        needle = term.strip().lower()
        return [
            req
            for req in self.list_requests()
            if needle in req.ref_number.lower()
            or needle in req.project_number.lower()
            or needle in req.beneficiary_name.lower()
            or needle in req.country.lower()
        ]

    def update_request(
        self,
        request_id: str,
        expected_version: int,
        changes: dict[str, Any],
        event: TimelineEvent,
    ) -> Optional[WithdrawalRequest]:
        with self._owner(request_id, "update_request"):
            current = self._requests.get(request_id)
            if current is None:
                return None
            if current.version != expected_version:
                raise ConcurrentModification(stale_request(request_id, expected_version))
            updated = replace(current, **changes, version=current.version + 1)
            self._requests[request_id] = updated
            self._events[request_id].append(event)
            return updated

    # Timeline operations
    def add_event(self, event: TimelineEvent) -> None:
        with self._owner(event.request_id, "add_event"):
            self._events.setdefault(event.request_id, []).append(event)

    def list_events(self, request_id: str) -> list[TimelineEvent]:
        events = list(self._events.get(request_id, ()))
        # sorted() is stable, so equal timestamps keep append order
        return sorted(events, key=lambda event: event.created_at)

    # Comment operations
    def add_comment(self, comment: RequestComment, event: TimelineEvent) -> None:
        with self._owner(comment.request_id, "add_comment"):
            self._comments.setdefault(comment.request_id, []).append(comment)
            self._events.setdefault(comment.request_id, []).append(event)

    def list_comments(self, request_id: str) -> list[RequestComment]:
        return list(self._comments.get(request_id, ()))
