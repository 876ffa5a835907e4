"""Timeline (audit log) domain service."""

from __future__ import annotations

import logging
from datetime import datetime, UTC
from typing import TYPE_CHECKING, Any, Callable, Optional

from withdrawals.domain.entities import (
    EventType,
    RequestStage,
    TimelineEvent,
    TimelineStats,
    User,
)
from withdrawals.domain.errors import NotFoundError, ValidationError, request_not_found
from withdrawals.domain.identifiers import IdGenerator

if TYPE_CHECKING:
    from withdrawals.database.base import Database

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class TimelineService:
    """Service for the append-only request timeline.

    Events are immutable once recorded. Transition and comment events are
    persisted by the repository in the same unit as the change they
    describe; ``record`` is for standalone events such as document uploads.
    """

    def __init__(
        self,
        db: Database,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize timeline service.

        Args:
            db: Database instance
            id_generator: Event ID strategy
            clock: Returns the current (timezone-aware) time
        """
        self.db = db
        self.id_generator = id_generator or IdGenerator()
        self.clock = clock or utc_now

    def build_event(
        self,
        request_id: str,
        actor: User,
        event_type: EventType,
        title: str,
        description: str,
        stage: RequestStage,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> TimelineEvent:
        """Build (but do not store) a timeline event.

        ``stage`` is stored as ``metadata["stage"]`` and tells which workflow
        stage the event belongs to when the timeline is grouped.
        """
        return TimelineEvent(
            id=self.id_generator.new_id(),
            request_id=request_id,
            user_id=actor.id,
            user_name=actor.name,
            event_type=event_type,
            title=title,
            description=description,
            created_at=created_at or self.clock(),
            previous_value=previous_value,
            new_value=new_value,
            metadata={**(metadata or {}), "stage": stage.value},
        )

    def record(self, event: TimelineEvent) -> TimelineEvent:
        """Append a standalone event.

        Raises:
            NotFoundError: If the request does not exist
        """
        if self.db.get_request(event.request_id) is None:
            raise NotFoundError(request_not_found(event.request_id))
        self.db.add_event(event)
        logger.info("Recorded %s event for request %s", event.event_type.value, event.request_id)
        return event

    def record_document_upload(
        self,
        request_id: str,
        actor: User,
        file_name: str,
        document_type: str = "other",
    ) -> TimelineEvent:
        """Record that a document was attached to a request."""
        if not file_name or not file_name.strip():
            raise ValidationError("Document file name is required")
        request = self.db.get_request(request_id)
        if request is None:
            raise NotFoundError(request_not_found(request_id))
        event = self.build_event(
            request_id=request_id,
            actor=actor,
            event_type=EventType.DOCUMENT_UPLOADED,
            title="Document uploaded",
            description=f"{actor.name} uploaded {file_name.strip()}",
            stage=request.current_stage,
            new_value=file_name.strip(),
            metadata={"document_type": document_type},
        )
        return self.record(event)

    def get_timeline_by_request_id(self, request_id: str) -> list[TimelineEvent]:
        """Get the events of a request, oldest first."""
        return self.db.list_events(request_id)

    def get_timeline_stats(self, request_id: str) -> TimelineStats:
        """Get event count and last activity for a request.

        Last activity falls back to the request's ``updated_at`` when no
        events exist yet.
        """
        events = self.db.list_events(request_id)
        if events:
            return TimelineStats(
                event_count=len(events),
                last_activity=max(event.created_at for event in events),
            )
        request = self.db.get_request(request_id)
        return TimelineStats(
            event_count=0,
            last_activity=request.updated_at if request is not None else None,
        )
