"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including enum values and the
timezone that SQLite drops from stored timestamps.
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Optional

from withdrawals.domain import entities as domain
from withdrawals.database.models import (
    User as ORMUser,
    WithdrawalRequest as ORMRequest,
    TimelineEvent as ORMEvent,
    RequestComment as ORMComment,
)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from the database."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Shift aware datetimes to UTC before storing; the database keeps wall time only."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        email=orm_user.email,
        role=domain.UserRole(orm_user.role),
        can_create_requests=orm_user.can_create_requests,
        can_approve_reject=orm_user.can_approve_reject,
        can_disburse=orm_user.can_disburse,
        view_only_access=orm_user.view_only_access,
    )


def user_to_orm(user: domain.User) -> ORMUser:
    """Convert domain User entity to a new SQLAlchemy User model."""
    return ORMUser(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role.value,
        can_create_requests=user.can_create_requests,
        can_approve_reject=user.can_approve_reject,
        can_disburse=user.can_disburse,
        view_only_access=user.view_only_access,
    )


def request_to_domain(orm_request: ORMRequest) -> domain.WithdrawalRequest:
    """Convert SQLAlchemy WithdrawalRequest model to domain entity."""
    return domain.WithdrawalRequest(
        id=orm_request.id,
        project_number=orm_request.project_number,
        ref_number=orm_request.ref_number,
        beneficiary_name=orm_request.beneficiary_name,
        country=orm_request.country,
        amount=Decimal(orm_request.amount),
        currency=domain.Currency(orm_request.currency),
        value_date=orm_request.value_date,
        current_stage=domain.RequestStage(orm_request.current_stage),
        status=orm_request.status,
        priority=domain.Priority(orm_request.priority),
        assigned_to=orm_request.assigned_to,
        processing_days=orm_request.processing_days,
        created_at=as_utc(orm_request.created_at),
        updated_at=as_utc(orm_request.updated_at),
        notes=orm_request.notes,
        attachments=tuple(orm_request.attachments or ()),
        version=orm_request.version,
    )


def request_to_orm(request: domain.WithdrawalRequest) -> ORMRequest:
    """Convert domain WithdrawalRequest entity to a new SQLAlchemy model."""
    return ORMRequest(
        id=request.id,
        project_number=request.project_number,
        ref_number=request.ref_number,
        beneficiary_name=request.beneficiary_name,
        country=request.country,
        amount=request.amount,
        currency=request.currency.value,
        value_date=request.value_date,
        current_stage=request.current_stage.value,
        status=request.status,
        priority=request.priority.value,
        assigned_to=request.assigned_to,
        processing_days=request.processing_days,
        notes=request.notes,
        attachments=list(request.attachments),
        created_at=to_utc(request.created_at),
        updated_at=to_utc(request.updated_at),
        version=request.version,
    )


def request_changes_to_columns(changes: dict) -> dict:
    """Convert domain field changes into column values (enums to strings)."""
    columns = {}
    for name, value in changes.items():
        if isinstance(value, (domain.RequestStage, domain.Priority, domain.Currency)):
            value = value.value
        elif name == "attachments":
            value = list(value)
        elif isinstance(value, datetime):
            value = to_utc(value)
        columns[name] = value
    return columns


def event_to_domain(orm_event: ORMEvent) -> domain.TimelineEvent:
    """Convert SQLAlchemy TimelineEvent model to domain entity."""
    return domain.TimelineEvent(
        id=orm_event.id,
        request_id=orm_event.request_id,
        user_id=orm_event.user_id,
        user_name=orm_event.user_name,
        event_type=domain.EventType(orm_event.event_type),
        title=orm_event.title,
        description=orm_event.description,
        created_at=as_utc(orm_event.created_at),
        previous_value=orm_event.previous_value,
        new_value=orm_event.new_value,
        metadata=dict(orm_event.event_metadata or {}),
    )


def event_to_orm(event: domain.TimelineEvent) -> ORMEvent:
    """Convert domain TimelineEvent entity to a new SQLAlchemy model."""
    return ORMEvent(
        id=event.id,
        request_id=event.request_id,
        user_id=event.user_id,
        user_name=event.user_name,
        event_type=event.event_type.value,
        title=event.title,
        description=event.description,
        previous_value=event.previous_value,
        new_value=event.new_value,
        event_metadata=dict(event.metadata),
        created_at=to_utc(event.created_at),
    )


def comment_to_domain(orm_comment: ORMComment) -> domain.RequestComment:
    """Convert SQLAlchemy RequestComment model to domain entity."""
    return domain.RequestComment(
        id=orm_comment.id,
        request_id=orm_comment.request_id,
        user_id=orm_comment.user_id,
        user_name=orm_comment.user_name,
        comment_text=orm_comment.comment_text,
        created_at=as_utc(orm_comment.created_at),
        updated_at=as_utc(orm_comment.updated_at),
        mentioned_users=tuple(orm_comment.mentioned_users or ()),
        is_internal=orm_comment.is_internal,
    )


def comment_to_orm(comment: domain.RequestComment) -> ORMComment:
    """Convert domain RequestComment entity to a new SQLAlchemy model."""
    return ORMComment(
        id=comment.id,
        request_id=comment.request_id,
        user_id=comment.user_id,
        user_name=comment.user_name,
        comment_text=comment.comment_text,
        mentioned_users=list(comment.mentioned_users),
        is_internal=comment.is_internal,
        created_at=to_utc(comment.created_at),
        updated_at=to_utc(comment.updated_at),
    )
