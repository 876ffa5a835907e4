"""Domain model entities for the withdrawal workflow.

These are pure data classes representing business concepts, independent of
database schema. Storage adapters convert to and from them, so the workflow
rules stay stable whichever backing store is plugged in.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class RequestStage(str, Enum):
    """Where a request sits in the approval pipeline."""

    INITIAL_REVIEW = "initial_review"
    TECHNICAL_REVIEW = "technical_review"
    CORE_BANKING = "core_banking"
    DISBURSED = "disbursed"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """Fixed user categories of the workflow."""

    ARCHIVE_TEAM = "archive_team"
    OPERATIONS_TEAM = "operations_team"
    CORE_BANKING_TEAM = "core_banking_team"
    LOAN_ADMIN = "loan_admin"
    ADMIN = "admin"
    OBSERVER = "observer"


class ActionType(str, Enum):
    """Actions a user may attempt against a request."""

    APPROVE = "approve"
    REJECT = "reject"
    DISBURSE = "disburse"
    VIEW = "view"
    CREATE = "create_request"
    SUBMIT = "submit_for_review"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    AED = "AED"


class EventType(str, Enum):
    """Kinds of timeline events."""

    CREATED = "created"
    STATUS_CHANGE = "status_change"
    APPROVED = "approved"
    REJECTED = "rejected"
    DISBURSED = "disbursed"
    COMMENT_ADDED = "comment_added"
    DOCUMENT_UPLOADED = "document_uploaded"
    ASSIGNMENT_CHANGED = "assignment_changed"


@dataclass(frozen=True)
class User:
    """User as seen by the workflow core.

    Capability flags are orthogonal to the role: ``can_create_requests``
    gates intake, ``view_only_access`` restricts a non-admin user to viewing.
    """

    id: str
    name: str
    email: str
    role: UserRole
    can_create_requests: bool = False
    can_approve_reject: bool = False
    can_disburse: bool = False
    view_only_access: bool = False


@dataclass(frozen=True)
class WithdrawalRequest:
    """Withdrawal request domain entity.

    ``version`` is bumped by the repository on every update and is used as
    the compare-and-swap token for transitions.
    """

    id: str
    project_number: str
    ref_number: str
    beneficiary_name: str
    country: str
    amount: Decimal
    currency: Currency
    value_date: date
    current_stage: RequestStage
    status: str
    priority: Priority
    assigned_to: str
    processing_days: int
    created_at: datetime
    updated_at: datetime
    notes: Optional[str] = None
    attachments: tuple[str, ...] = ()
    version: int = 1


@dataclass(frozen=True)
class TimelineEvent:
    """Immutable audit record of one action taken against a request."""

    id: str
    request_id: str
    user_id: str
    user_name: str
    event_type: EventType
    title: str
    description: str
    created_at: datetime
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestComment:
    """Note attached to a request."""

    id: str
    request_id: str
    user_id: str
    user_name: str
    comment_text: str
    created_at: datetime
    updated_at: datetime
    mentioned_users: tuple[str, ...] = ()
    is_internal: bool = False


@dataclass(frozen=True)
class NewRequest:
    """Input for request creation.

    Fields are loosely typed on purpose: the workflow engine validates and
    normalizes them before a ``WithdrawalRequest`` is built.
    """

    beneficiary_name: str
    country: str
    amount: Any
    currency: Any
    value_date: Any
    project_number: Optional[str] = None
    ref_number: Optional[str] = None
    priority: Any = Priority.MEDIUM
    notes: Optional[str] = None
    attachments: tuple[str, ...] = ()


@dataclass(frozen=True)
class PermissionCheck:
    """Outcome of a permission decision."""

    can_perform: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class TimelineStats:
    event_count: int
    last_activity: Optional[datetime]


@dataclass(frozen=True)
class RequestDetails:
    """A request together with its comments and timeline."""

    request: WithdrawalRequest
    comments: tuple[RequestComment, ...]
    timeline: tuple[TimelineEvent, ...]
    total_comments: int
    last_activity: datetime


@dataclass(frozen=True)
class DashboardStats:
    """Read-side statistics over a snapshot of requests."""

    total_requests: int
    pending_requests: int
    avg_processing_time: int
    due_soon: int
    by_stage: dict[RequestStage, int]
    by_priority: dict[Priority, int]


@dataclass(frozen=True)
class StageStep:
    """One displayed step of the four-stage workflow."""

    stage: RequestStage
    team: str
    short_name: str
    description: str
    estimated_days: int


@dataclass(frozen=True)
class StageProgress:
    """Progress of a request through the displayed workflow steps."""

    steps: tuple[tuple[StageStep, str], ...]
    percentage: float
    is_completed: bool
