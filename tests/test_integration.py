"""Integration tests for end-to-end workflows."""

import pytest

from withdrawals.domain.entities import EventType, RequestStage
from withdrawals.domain.errors import PermissionDenied
from withdrawals.domain.stages import events_for_stage, stage_progress


def test_request_lifecycle(workflow, comment_service, dashboard_service, users, new_request_data, clock):
    """Create → submit → approve → disburse for 100000 USD to Egypt."""
    # Step 1: Archive creates the request
    request = workflow.create_request(new_request_data, users["archive"])
    assert request.current_stage == RequestStage.INITIAL_REVIEW
    assert request.amount == 100000
    assert request.country == "Egypt"

    # Step 2: Archive hands it to Operations
    clock.advance(hours=4)
    request = workflow.submit_for_review(request.id, users["archive"])
    assert request.current_stage == RequestStage.TECHNICAL_REVIEW

    # Step 3: Operations comments and approves
    clock.advance(days=1)
    comment_service.add_comment(request.id, users["operations"], "Beneficiary verified")
    request = workflow.approve(request.id, users["operations"])
    assert request.current_stage == RequestStage.CORE_BANKING

    events = workflow.timeline.get_timeline_by_request_id(request.id)
    assert [e.event_type for e in events].count(EventType.APPROVED) == 1

    # Step 4: Core Banking disburses
    clock.advance(days=1)
    request = workflow.disburse(request.id, users["core_banking"])
    assert request.current_stage == RequestStage.DISBURSED
    assert request.processing_days == 3

    events = workflow.timeline.get_timeline_by_request_id(request.id)
    transitions = [e for e in events if e.event_type != EventType.COMMENT_ADDED]
    assert [e.event_type for e in transitions] == [
        EventType.CREATED,
        EventType.STATUS_CHANGE,
        EventType.APPROVED,
        EventType.DISBURSED,
    ]
    assert [e.event_type for e in events].count(EventType.DISBURSED) == 1

    # Step 5: Read side reflects the final state
    progress = stage_progress(request)
    assert progress.is_completed
    assert len(events_for_stage(events, RequestStage.TECHNICAL_REVIEW)) == 2

    stats = dashboard_service.get_stats()
    assert stats.total_requests == 1
    assert stats.pending_requests == 0
    assert stats.avg_processing_time == 3

    details = workflow.get_request_details(request.id)
    assert details.total_comments == 1
    assert details.last_activity == clock()


@pytest.mark.parametrize("fixture_name", ["sample_request", "technical_request", "core_banking_request"])
def test_archive_cannot_disburse_any_request(request, workflow, users, fixture_name):
    """Archive attempts to disburse are refused whatever the stage."""
    target = request.getfixturevalue(fixture_name)
    before = workflow.get_request(target.id)
    timeline_before = workflow.timeline.get_timeline_by_request_id(target.id)

    with pytest.raises(PermissionDenied):
        workflow.disburse(target.id, users["archive"])

    assert workflow.get_request(target.id) == before
    assert workflow.timeline.get_timeline_by_request_id(target.id) == timeline_before


def test_rejection_round_trip(workflow, users, sample_request):
    """A rejected request goes back to Archive and can be approved later."""
    workflow.submit_for_review(sample_request.id, users["archive"])
    workflow.reject(sample_request.id, users["operations"], "Missing signature")
    workflow.submit_for_review(sample_request.id, users["archive"], "Signature added")
    request = workflow.approve(sample_request.id, users["operations"])

    assert request.current_stage == RequestStage.CORE_BANKING
    assert request.version == 5
    events = workflow.timeline.get_timeline_by_request_id(sample_request.id)
    assert len(events) == 5
