"""Shared pytest fixtures for withdrawals tests."""

import tempfile
import os
from datetime import date, datetime, timedelta, UTC
from decimal import Decimal
import pytest

from withdrawals.database.factories import create_memory_database, create_sqlite_database
from withdrawals.domain.comments import CommentService
from withdrawals.domain.dashboard import DashboardService
from withdrawals.domain.entities import Currency, NewRequest, UserRole
from withdrawals.domain.identifiers import SequentialIdGenerator
from withdrawals.domain.timeline import TimelineService
from withdrawals.domain.users import UserService
from withdrawals.domain.workflow import WorkflowService


START = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock; every service in a test shares one instance."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingNotifier:
    """Notifier that remembers what it was asked to send."""

    def __init__(self):
        self.sent = []

    def notify(self, kind: str, ref_number: str) -> None:
        self.sent.append((kind, ref_number))


class FailingNotifier:
    def notify(self, kind: str, ref_number: str) -> None:
        raise RuntimeError("mail server down")


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path, timeout=5.0)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def memory_db():
    """Create an in-memory database for testing."""
    db = create_memory_database(timeout=5.0)
    db.connect()
    yield db
    db.disconnect()


@pytest.fixture(params=["sqlite", "memory"])
def db(request):
    """Run the test once against each Database implementation."""
    if request.param == "sqlite":
        return request.getfixturevalue("temp_db")
    return request.getfixturevalue("memory_db")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ids():
    return SequentialIdGenerator()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()


@pytest.fixture
def user_service(db, ids):
    """Create a UserService with the test database."""
    return UserService(db, id_generator=ids)


@pytest.fixture
def users(user_service):
    """Create one user per role, keyed by a short name."""
    return {
        "archive": user_service.create_user(
            "Sara Archive", "sara@example.com", UserRole.ARCHIVE_TEAM, can_create_requests=True
        ),
        "operations": user_service.create_user(
            "Omar Operations", "omar@example.com", UserRole.OPERATIONS_TEAM, can_approve_reject=True
        ),
        "core_banking": user_service.create_user(
            "Cora Banking", "cora@example.com", UserRole.CORE_BANKING_TEAM, can_disburse=True
        ),
        "loan_admin": user_service.create_user(
            "Lina Loans", "lina@example.com", UserRole.LOAN_ADMIN
        ),
        "admin": user_service.create_user("Adam Admin", "adam@example.com", UserRole.ADMIN),
        "observer": user_service.create_user(
            "Olga Observer", "olga@example.com", UserRole.OBSERVER
        ),
        "viewer": user_service.create_user(
            "Victor Viewer",
            "victor@example.com",
            UserRole.OPERATIONS_TEAM,
            can_create_requests=True,
            view_only_access=True,
        ),
    }


@pytest.fixture
def timeline_service(db, ids, clock):
    """Create a TimelineService with the test database."""
    return TimelineService(db, id_generator=ids, clock=clock)


@pytest.fixture
def workflow(db, timeline_service, notifier, ids, clock):
    """Create a WorkflowService with deterministic ids and clock."""
    return WorkflowService(
        db, timeline=timeline_service, notifier=notifier, id_generator=ids, clock=clock
    )


@pytest.fixture
def comment_service(db, timeline_service, ids, clock):
    """Create a CommentService with the test database."""
    return CommentService(db, timeline=timeline_service, id_generator=ids, clock=clock)


@pytest.fixture
def dashboard_service(db, clock):
    """Create a DashboardService with the test database."""
    return DashboardService(db, clock=clock)


@pytest.fixture
def new_request_data():
    """Valid creation input: 100000 USD to Egypt."""
    return NewRequest(
        beneficiary_name="Ministry of Finance",
        country="Egypt",
        amount=Decimal("100000"),
        currency=Currency.USD,
        value_date=date(2024, 3, 15),
    )


@pytest.fixture
def sample_request(workflow, users, new_request_data):
    """A freshly created request in initial review."""
    return workflow.create_request(new_request_data, users["archive"])


@pytest.fixture
def technical_request(workflow, users, sample_request):
    """A request submitted to technical review."""
    return workflow.submit_for_review(sample_request.id, users["archive"])


@pytest.fixture
def core_banking_request(workflow, users, technical_request):
    """A request approved by operations and waiting in core banking."""
    return workflow.approve(technical_request.id, users["operations"])


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
