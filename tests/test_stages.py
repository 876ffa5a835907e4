"""Tests for the stage table and workflow progress."""

from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from withdrawals.domain.entities import (
    Currency,
    EventType,
    Priority,
    RequestStage,
    TimelineEvent,
    WithdrawalRequest,
)
from withdrawals.domain.stages import (
    STAGE_TRANSITIONS,
    TERMINAL_STAGES,
    WORKFLOW_STEPS,
    events_for_stage,
    is_valid_transition,
    stage_label,
    stage_progress,
)

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def make_request(stage: RequestStage) -> WithdrawalRequest:
    return WithdrawalRequest(
        id="r1",
        project_number="PRJ-1",
        ref_number="WR-1",
        beneficiary_name="Ministry of Finance",
        country="Egypt",
        amount=Decimal("100000"),
        currency=Currency.USD,
        value_date=date(2024, 3, 15),
        current_stage=stage,
        status="",
        priority=Priority.MEDIUM,
        assigned_to="archive001",
        processing_days=0,
        created_at=NOW,
        updated_at=NOW,
    )


def make_event(event_type: EventType, stage: str) -> TimelineEvent:
    return TimelineEvent(
        id=f"{event_type.value}-{stage}",
        request_id="r1",
        user_id="u1",
        user_name="Test User",
        event_type=event_type,
        title="",
        description="",
        created_at=NOW,
        metadata={"stage": stage},
    )


class TestTransitionTable:
    def test_every_stage_has_an_entry(self):
        assert set(STAGE_TRANSITIONS) == set(RequestStage)

    @pytest.mark.parametrize(
        "current,target",
        [
            (RequestStage.INITIAL_REVIEW, RequestStage.TECHNICAL_REVIEW),
            (RequestStage.TECHNICAL_REVIEW, RequestStage.CORE_BANKING),
            (RequestStage.TECHNICAL_REVIEW, RequestStage.INITIAL_REVIEW),
            (RequestStage.CORE_BANKING, RequestStage.DISBURSED),
            (RequestStage.APPROVED, RequestStage.DISBURSED),
        ],
    )
    def test_allowed(self, current, target):
        assert is_valid_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (RequestStage.INITIAL_REVIEW, RequestStage.CORE_BANKING),
            (RequestStage.INITIAL_REVIEW, RequestStage.DISBURSED),
            (RequestStage.CORE_BANKING, RequestStage.INITIAL_REVIEW),
            (RequestStage.DISBURSED, RequestStage.INITIAL_REVIEW),
            (RequestStage.REJECTED, RequestStage.INITIAL_REVIEW),
        ],
    )
    def test_not_allowed(self, current, target):
        assert not is_valid_transition(current, target)

    def test_terminal_stages(self):
        assert TERMINAL_STAGES == {RequestStage.DISBURSED, RequestStage.REJECTED}

    def test_stage_label(self):
        assert stage_label(RequestStage.CORE_BANKING) == "Core Banking"
        assert stage_label(RequestStage.INITIAL_REVIEW) == "Initial Review"


class TestStageProgress:
    def test_initial_review(self):
        progress = stage_progress(make_request(RequestStage.INITIAL_REVIEW))
        statuses = [status for _, status in progress.steps]
        assert statuses == ["current", "pending", "pending", "pending"]
        assert progress.percentage == 25.0
        assert progress.is_completed is False

    def test_core_banking(self):
        progress = stage_progress(make_request(RequestStage.CORE_BANKING))
        statuses = [status for _, status in progress.steps]
        assert statuses == ["completed", "completed", "current", "pending"]
        assert progress.percentage == 75.0

    def test_disbursed_is_complete(self):
        progress = stage_progress(make_request(RequestStage.DISBURSED))
        assert all(status == "completed" for _, status in progress.steps)
        assert progress.percentage == 100.0
        assert progress.is_completed is True

    @pytest.mark.parametrize("stage", [RequestStage.APPROVED, RequestStage.REJECTED])
    def test_stages_outside_displayed_workflow(self, stage):
        progress = stage_progress(make_request(stage))
        assert all(status == "pending" for _, status in progress.steps)
        assert progress.percentage == 0.0

    def test_workflow_steps(self):
        assert [step.team for step in WORKFLOW_STEPS] == [
            "Archive Team",
            "Operations Team",
            "Core Banking",
            "Loan Admin",
        ]
        assert sum(step.estimated_days for step in WORKFLOW_STEPS) == 6


class TestEventsForStage:
    def test_groups_by_stage_metadata(self):
        timeline = [
            make_event(EventType.CREATED, "initial_review"),
            make_event(EventType.COMMENT_ADDED, "initial_review"),
            make_event(EventType.STATUS_CHANGE, "initial_review"),
            make_event(EventType.APPROVED, "technical_review"),
            make_event(EventType.DISBURSED, "core_banking"),
        ]
        initial = events_for_stage(timeline, RequestStage.INITIAL_REVIEW)
        assert [e.event_type for e in initial] == [
            EventType.CREATED,
            EventType.COMMENT_ADDED,
            EventType.STATUS_CHANGE,
        ]
        assert [e.event_type for e in events_for_stage(timeline, RequestStage.TECHNICAL_REVIEW)] == [
            EventType.APPROVED
        ]

    def test_disbursed_event_also_shown_in_final_step(self):
        timeline = [make_event(EventType.DISBURSED, "core_banking")]
        assert events_for_stage(timeline, RequestStage.DISBURSED) == timeline
        assert events_for_stage(timeline, RequestStage.CORE_BANKING) == timeline

    def test_created_event_without_metadata(self):
        event = replace(make_event(EventType.CREATED, "x"), metadata={})
        assert events_for_stage([event], RequestStage.INITIAL_REVIEW) == [event]
