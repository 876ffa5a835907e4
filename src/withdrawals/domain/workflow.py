"""Workflow engine: the single writer of stage-affecting request fields."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Callable, Optional

from withdrawals.domain.entities import (
    ActionType,
    Currency,
    EventType,
    NewRequest,
    Priority,
    RequestDetails,
    RequestStage,
    User,
    WithdrawalRequest,
)
from withdrawals.domain.errors import (
    ConcurrentModification,
    InvalidTransition,
    NotFoundError,
    ValidationError,
    missing_fields,
    request_not_found,
)
from withdrawals.domain.identifiers import IdGenerator
from withdrawals.domain.notifications import LoggingNotifier, Notifier
from withdrawals.domain.permissions import require_permission
from withdrawals.domain.stages import (
    ARCHIVE_QUEUE,
    CORE_BANKING_QUEUE,
    OPERATIONS_QUEUE,
    stage_label,
)
from withdrawals.domain.timeline import TimelineService, utc_now

if TYPE_CHECKING:
    from withdrawals.database.base import Database

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
INITIAL_STATUS = "New request - Pending initial review"


@dataclass(frozen=True)
class TransitionRule:
    """What a named workflow operation does to a request."""

    action: ActionType
    from_stage: RequestStage
    to_stage: RequestStage
    event_type: EventType
    title: str
    status_template: str
    description_template: str
    notification: str
    assigned_to: Optional[str] = None


TRANSITION_RULES: dict[ActionType, TransitionRule] = {
    ActionType.SUBMIT: TransitionRule(
        action=ActionType.SUBMIT,
        from_stage=RequestStage.INITIAL_REVIEW,
        to_stage=RequestStage.TECHNICAL_REVIEW,
        event_type=EventType.STATUS_CHANGE,
        title="Submitted for technical review",
        status_template="Forwarded by {actor} - Pending technical review by Operations Team",
        description_template="Request forwarded to Operations Team by {actor}",
        notification="submitted",
        assigned_to=OPERATIONS_QUEUE,
    ),
    ActionType.APPROVE: TransitionRule(
        action=ActionType.APPROVE,
        from_stage=RequestStage.TECHNICAL_REVIEW,
        to_stage=RequestStage.CORE_BANKING,
        event_type=EventType.APPROVED,
        title="Request approved",
        status_template="Approved by {actor} - Moved to Core Banking for disbursement",
        description_template="Request approved by {actor}",
        notification="approved",
        assigned_to=CORE_BANKING_QUEUE,
    ),
    ActionType.REJECT: TransitionRule(
        action=ActionType.REJECT,
        from_stage=RequestStage.TECHNICAL_REVIEW,
        to_stage=RequestStage.INITIAL_REVIEW,
        event_type=EventType.REJECTED,
        title="Request rejected",
        status_template="Rejected by {actor} - Returned to Initial Review for corrections",
        description_template="Request rejected by {actor}",
        notification="rejected",
        assigned_to=ARCHIVE_QUEUE,
    ),
    ActionType.DISBURSE: TransitionRule(
        action=ActionType.DISBURSE,
        from_stage=RequestStage.CORE_BANKING,
        to_stage=RequestStage.DISBURSED,
        event_type=EventType.DISBURSED,
        title="Funds disbursed",
        status_template="Successfully disbursed by {actor}",
        description_template="Request disbursed by {actor}",
        notification="disbursed",
    ),
}


def processing_days(created_at: datetime, now: datetime) -> int:
    """Whole days between creation and now, rounded up."""
    elapsed = (now - created_at).total_seconds()
    return max(0, math.ceil(elapsed / SECONDS_PER_DAY))


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount '{value}'")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"Amount must be greater than zero, got {value}")
    if amount.normalize().as_tuple().exponent < -2:
        raise ValidationError(f"Amount cannot have more than 2 decimal places, got {value}")
    return amount


def _parse_enum(enum_cls, value: Any, field_name: str, normalize: Callable[[str], str] = str.lower):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(normalize(str(value).strip()))
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field_name} '{value}' (expected one of: {allowed})")


def _parse_value_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid value date '{value}'")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class WorkflowService:
    """Service that creates requests and moves them through the workflow.

    Every operation checks permission, validates the current stage, then
    hands the change and its timeline event to the repository as one
    versioned write. A write that loses a race raises
    ``ConcurrentModification``; nothing is retried here.
    """

    def __init__(
        self,
        db: Database,
        timeline: Optional[TimelineService] = None,
        notifier: Optional[Notifier] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize workflow service.

        Args:
            db: Database instance
            timeline: Timeline service used to build events
            notifier: Notification collaborator (fire-and-forget)
            id_generator: Identifier strategy for requests and events
            clock: Returns the current (timezone-aware) time
        """
        self.db = db
        self.id_generator = id_generator or IdGenerator()
        self.clock = clock or utc_now
        self.timeline = timeline or TimelineService(
            db, id_generator=self.id_generator, clock=self.clock
        )
        self.notifier = notifier or LoggingNotifier()

    def create_request(self, data: NewRequest, actor: User) -> WithdrawalRequest:
        """Create a request in the initial review stage.

        Args:
            data: Request input
            actor: User creating the request (needs the intake capability)

        Returns:
            Created request

        Raises:
            PermissionDenied: If actor may not create requests
            ValidationError: If required fields are missing or invalid
        """
        require_permission(actor, ActionType.CREATE)

        required = {
            "amount": data.amount,
            "country": data.country,
            "beneficiary_name": data.beneficiary_name,
            "currency": data.currency,
            "value_date": data.value_date,
        }
        missing = [name for name, value in required.items() if _is_blank(value)]
        if missing:
            raise ValidationError(missing_fields(missing))

        amount = _parse_amount(data.amount)
        currency = _parse_enum(Currency, data.currency, "currency", normalize=str.upper)
        priority = _parse_enum(Priority, data.priority or Priority.MEDIUM, "priority")
        value_date = _parse_value_date(data.value_date)

        now = self.clock()
        request = WithdrawalRequest(
            id=self.id_generator.new_id(),
            project_number=(data.project_number or "").strip() or self.id_generator.project_number(),
            ref_number=(data.ref_number or "").strip() or self.id_generator.ref_number(),
            beneficiary_name=data.beneficiary_name.strip(),
            country=data.country.strip(),
            amount=amount,
            currency=currency,
            value_date=value_date,
            current_stage=RequestStage.INITIAL_REVIEW,
            status=INITIAL_STATUS,
            priority=priority,
            assigned_to=ARCHIVE_QUEUE,
            processing_days=0,
            created_at=now,
            updated_at=now,
            notes=data.notes,
            attachments=tuple(data.attachments),
        )
        event = self.timeline.build_event(
            request_id=request.id,
            actor=actor,
            event_type=EventType.CREATED,
            title="Request created",
            description=f"Withdrawal request {request.ref_number} created by {actor.name}",
            stage=RequestStage.INITIAL_REVIEW,
            new_value=RequestStage.INITIAL_REVIEW.value,
            created_at=now,
        )
        self.db.create_request(request, event)
        logger.info("Created request %s (%s)", request.id, request.ref_number)
        self._notify("created", request.ref_number)
        return request

    def submit_for_review(
        self, request_id: str, actor: User, comment: Optional[str] = None
    ) -> WithdrawalRequest:
        """Forward a request from Archive to Operations (technical review)."""
        return self._transition(ActionType.SUBMIT, request_id, actor, comment)

    def approve(self, request_id: str, actor: User, comment: Optional[str] = None) -> WithdrawalRequest:
        """Approve a request in technical review, moving it to core banking."""
        return self._transition(ActionType.APPROVE, request_id, actor, comment)

    def reject(self, request_id: str, actor: User, comment: Optional[str] = None) -> WithdrawalRequest:
        """Reject a request in technical review, returning it to initial review."""
        return self._transition(ActionType.REJECT, request_id, actor, comment)

    def disburse(self, request_id: str, actor: User) -> WithdrawalRequest:
        """Mark a request in core banking as disbursed.

        Processing days are computed from the wall-clock time of this call.
        """
        return self._transition(ActionType.DISBURSE, request_id, actor, None)

    def _transition(
        self,
        action: ActionType,
        request_id: str,
        actor: User,
        comment: Optional[str],
    ) -> WithdrawalRequest:
        rule = TRANSITION_RULES[action]
        request = self._require_request(request_id)
        require_permission(actor, action, request)

        if request.current_stage != rule.from_stage:
            raise InvalidTransition(request.id, action.value, request.current_stage.value)

        now = self.clock()
        changes: dict[str, Any] = {
            "current_stage": rule.to_stage,
            "status": rule.status_template.format(actor=actor.name),
            "updated_at": max(now, request.updated_at),
        }
        if rule.assigned_to is not None:
            changes["assigned_to"] = rule.assigned_to
        if action == ActionType.DISBURSE:
            changes["processing_days"] = processing_days(request.created_at, now)

        description = rule.description_template.format(actor=actor.name)
        if comment and comment.strip():
            description = f"{description}: {comment.strip()}"

        event = self.timeline.build_event(
            request_id=request.id,
            actor=actor,
            event_type=rule.event_type,
            title=rule.title,
            description=description,
            stage=rule.from_stage,
            previous_value=rule.from_stage.value,
            new_value=rule.to_stage.value,
            metadata={"action": action.value},
            created_at=changes["updated_at"],
        )

        try:
            updated = self.db.update_request(request.id, request.version, changes, event)
        except ConcurrentModification:
            logger.warning(
                "Concurrent modification: %s on request %s lost the race", action.value, request.id
            )
            raise
        if updated is None:
            raise NotFoundError(request_not_found(request_id))

        logger.info(
            "Request %s moved %s -> %s by %s",
            updated.id,
            stage_label(rule.from_stage),
            stage_label(rule.to_stage),
            actor.id,
        )
        self._notify(rule.notification, updated.ref_number)
        return updated

    def _require_request(self, request_id: str) -> WithdrawalRequest:
        request = self.db.get_request(request_id)
        if request is None:
            raise NotFoundError(request_not_found(request_id))
        return request

    def _notify(self, kind: str, ref_number: str) -> None:
        try:
            self.notifier.notify(kind, ref_number)
        except Exception:
            logger.warning("Notification %r for %s failed", kind, ref_number, exc_info=True)

    def get_request(self, request_id: str) -> Optional[WithdrawalRequest]:
        """Get request by ID."""
        return self.db.get_request(request_id)

    def list_requests(self) -> list[WithdrawalRequest]:
        """List all requests, newest first."""
        return self.db.list_requests()

    def search_requests(self, term: str) -> list[WithdrawalRequest]:
        """Search requests by reference, project, beneficiary or country.

        An empty term returns every request.
        """
        if not term or not term.strip():
            return self.db.list_requests()
        return self.db.search_requests(term)

    def get_request_details(self, request_id: str) -> RequestDetails:
        """Get a request with its comments, timeline and last activity.

        Raises:
            NotFoundError: If the request does not exist
        """
        request = self._require_request(request_id)
        comments = tuple(self.db.list_comments(request_id))
        timeline = tuple(self.timeline.get_timeline_by_request_id(request_id))
        stats = self.timeline.get_timeline_stats(request_id)
        return RequestDetails(
            request=request,
            comments=comments,
            timeline=timeline,
            total_comments=len(comments),
            last_activity=stats.last_activity or request.updated_at,
        )
