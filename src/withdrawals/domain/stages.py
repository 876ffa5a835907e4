"""Stage transition table and workflow progress."""

from typing import Sequence

from withdrawals.domain.entities import (
    EventType,
    RequestStage,
    StageProgress,
    StageStep,
    TimelineEvent,
    WithdrawalRequest,
)


STAGE_TRANSITIONS: dict[RequestStage, frozenset[RequestStage]] = {
    RequestStage.INITIAL_REVIEW: frozenset(
        {RequestStage.TECHNICAL_REVIEW, RequestStage.APPROVED, RequestStage.REJECTED}
    ),
    RequestStage.TECHNICAL_REVIEW: frozenset(
        {
            RequestStage.CORE_BANKING,
            RequestStage.INITIAL_REVIEW,
            RequestStage.APPROVED,
            RequestStage.REJECTED,
        }
    ),
    RequestStage.CORE_BANKING: frozenset(
        {RequestStage.DISBURSED, RequestStage.APPROVED, RequestStage.REJECTED}
    ),
    RequestStage.DISBURSED: frozenset(),
    RequestStage.APPROVED: frozenset({RequestStage.DISBURSED}),
    RequestStage.REJECTED: frozenset(),
}

TERMINAL_STAGES = frozenset(
    stage for stage, targets in STAGE_TRANSITIONS.items() if not targets
)

# Queue identifiers that own a request at each point of the workflow.
ARCHIVE_QUEUE = "archive001"
OPERATIONS_QUEUE = "ops001"
CORE_BANKING_QUEUE = "bank001"

WORKFLOW_STEPS: tuple[StageStep, ...] = (
    StageStep(
        stage=RequestStage.INITIAL_REVIEW,
        team="Archive Team",
        short_name="Archive",
        description="Document verification and initial review",
        estimated_days=1,
    ),
    StageStep(
        stage=RequestStage.TECHNICAL_REVIEW,
        team="Operations Team",
        short_name="Operations",
        description="Technical assessment and approval",
        estimated_days=3,
    ),
    StageStep(
        stage=RequestStage.CORE_BANKING,
        team="Core Banking",
        short_name="Banking",
        description="Financial processing and disbursement",
        estimated_days=2,
    ),
    StageStep(
        stage=RequestStage.DISBURSED,
        team="Loan Admin",
        short_name="Complete",
        description="Funds disbursed successfully",
        estimated_days=0,
    ),
)


def is_valid_transition(current: RequestStage, target: RequestStage) -> bool:
    """Check whether the transition table allows current -> target."""
    return target in STAGE_TRANSITIONS[current]


def stage_label(stage: RequestStage) -> str:
    """Return display label for a stage (e.g. 'Core Banking')."""
    return stage.value.replace("_", " ").title()


def stage_progress(request: WithdrawalRequest) -> StageProgress:
    """Compute per-step status and percentage for a request.

    Steps before the current one are 'completed', the current one is
    'current', later ones 'pending'. Stages outside the displayed workflow
    (approved, rejected) leave every step pending.
    """
    stages = [step.stage for step in WORKFLOW_STEPS]
    current_index = (
        stages.index(request.current_stage) if request.current_stage in stages else -1
    )
    is_completed = request.current_stage == RequestStage.DISBURSED

    steps = []
    for index, step in enumerate(WORKFLOW_STEPS):
        if current_index < 0:
            status = "pending"
        elif index < current_index:
            status = "completed"
        elif index == current_index:
            status = "completed" if is_completed else "current"
        else:
            status = "pending"
        steps.append((step, status))

    if is_completed:
        percentage = 100.0
    else:
        percentage = (current_index + 1) / len(WORKFLOW_STEPS) * 100

    return StageProgress(steps=tuple(steps), percentage=percentage, is_completed=is_completed)


def events_for_stage(
    timeline: Sequence[TimelineEvent], stage: RequestStage
) -> list[TimelineEvent]:
    """Return the events that belong to a workflow stage."""
    return [
        event
        for event in timeline
        if event.metadata.get("stage") == stage.value
        or (stage == RequestStage.INITIAL_REVIEW and event.event_type == EventType.CREATED)
        or (stage == RequestStage.DISBURSED and event.event_type == EventType.DISBURSED)
    ]
