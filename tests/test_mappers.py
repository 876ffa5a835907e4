"""Tests for domain <-> ORM mapper functions."""

from datetime import date, datetime, timezone, timedelta, UTC
from decimal import Decimal

from withdrawals.database import mappers
from withdrawals.domain import entities


def test_as_utc_attaches_timezone():
    naive = datetime(2024, 3, 1, 9, 0)
    assert mappers.as_utc(naive) == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def test_as_utc_keeps_aware_values():
    aware = datetime(2024, 3, 1, 9, 0, tzinfo=timezone(timedelta(hours=4)))
    assert mappers.as_utc(aware) is aware
    assert mappers.as_utc(None) is None


def test_request_changes_to_columns():
    columns = mappers.request_changes_to_columns(
        {
            "current_stage": entities.RequestStage.CORE_BANKING,
            "priority": entities.Priority.HIGH,
            "attachments": ("a.pdf",),
            "processing_days": 3,
        }
    )
    assert columns == {
        "current_stage": "core_banking",
        "priority": "high",
        "attachments": ["a.pdf"],
        "processing_days": 3,
    }


def test_request_round_trip():
    now = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    request = entities.WithdrawalRequest(
        id="r1",
        project_number="PRJ-1",
        ref_number="WR-1",
        beneficiary_name="Ministry of Finance",
        country="Egypt",
        amount=Decimal("100000.00"),
        currency=entities.Currency.AED,
        value_date=date(2024, 3, 15),
        current_stage=entities.RequestStage.TECHNICAL_REVIEW,
        status="Pending",
        priority=entities.Priority.URGENT,
        assigned_to="ops001",
        processing_days=0,
        created_at=now,
        updated_at=now,
        attachments=("agreement.pdf",),
        version=4,
    )
    orm = mappers.request_to_orm(request)
    assert orm.currency == "AED"
    assert orm.current_stage == "technical_review"
    assert orm.attachments == ["agreement.pdf"]
    assert mappers.request_to_domain(orm) == request


def test_event_metadata_column():
    event = entities.TimelineEvent(
        id="e1",
        request_id="r1",
        user_id="u1",
        user_name="Sara",
        event_type=entities.EventType.APPROVED,
        title="Request approved",
        description="",
        created_at=datetime(2024, 3, 1, tzinfo=UTC),
        metadata={"stage": "technical_review", "action": "approve"},
    )
    orm = mappers.event_to_orm(event)
    assert orm.event_type == "approved"
    assert orm.event_metadata == {"stage": "technical_review", "action": "approve"}
    assert mappers.event_to_domain(orm) == event


def test_to_orm_stores_utc_wall_time():
    gulf = timezone(timedelta(hours=4))
    local = datetime(2024, 3, 1, 13, 0, tzinfo=gulf)
    event = entities.TimelineEvent(
        id="e1",
        request_id="r1",
        user_id="u1",
        user_name="Sara",
        event_type=entities.EventType.CREATED,
        title="Request created",
        description="",
        created_at=local,
    )
    orm = mappers.event_to_orm(event)
    assert orm.created_at == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    assert mappers.request_changes_to_columns({"updated_at": local}) == {
        "updated_at": datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
    }
