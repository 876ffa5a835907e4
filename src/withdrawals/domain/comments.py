"""Comment domain service."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from withdrawals.domain.entities import ActionType, EventType, RequestComment, User
from withdrawals.domain.errors import NotFoundError, ValidationError, request_not_found
from withdrawals.domain.identifiers import IdGenerator
from withdrawals.domain.permissions import require_permission
from withdrawals.domain.timeline import TimelineService, utc_now

if TYPE_CHECKING:
    from withdrawals.database.base import Database

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class CommentService:
    """Service for append-only request comments."""

    def __init__(
        self,
        db: Database,
        timeline: Optional[TimelineService] = None,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize comment service.

        Args:
            db: Database instance
            timeline: Timeline service used to build events
            id_generator: Identifier strategy for comments and events
            clock: Returns the current (timezone-aware) time
        """
        self.db = db
        self.id_generator = id_generator or IdGenerator()
        self.clock = clock or utc_now
        self.timeline = timeline or TimelineService(
            db, id_generator=self.id_generator, clock=self.clock
        )

    def add_comment(
        self,
        request_id: str,
        author: User,
        comment_text: str,
        mentioned_users: Optional[Sequence[str]] = None,
        is_internal: bool = False,
    ) -> RequestComment:
        """Add a comment to a request.

        The comment and its ``comment_added`` timeline event are stored
        together.

        Args:
            request_id: Request ID
            author: Commenting user (needs view permission)
            comment_text: Comment body
            mentioned_users: IDs of users mentioned in the comment
            is_internal: Whether the comment is an internal note

        Returns:
            Created comment

        Raises:
            ValidationError: If the comment text is empty
            NotFoundError: If the request does not exist
        """
        if not comment_text or not comment_text.strip():
            raise ValidationError("Comment text is required")

        request = self.db.get_request(request_id)
        if request is None:
            raise NotFoundError(request_not_found(request_id))
        require_permission(author, ActionType.VIEW, request)

        now = self.clock()
        text = comment_text.strip()
        comment = RequestComment(
            id=self.id_generator.new_id(),
            request_id=request_id,
            user_id=author.id,
            user_name=author.name,
            comment_text=text,
            created_at=now,
            updated_at=now,
            mentioned_users=tuple(dict.fromkeys(mentioned_users or ())),
            is_internal=is_internal,
        )
        preview = text if len(text) <= PREVIEW_LENGTH else text[: PREVIEW_LENGTH - 3] + "..."
        event = self.timeline.build_event(
            request_id=request_id,
            actor=author,
            event_type=EventType.COMMENT_ADDED,
            title="Internal note added" if is_internal else "Comment added",
            description=preview,
            stage=request.current_stage,
            metadata={"comment_id": comment.id, "is_internal": is_internal},
            created_at=now,
        )
        self.db.add_comment(comment, event)
        logger.info("Comment %s added to request %s by %s", comment.id, request_id, author.id)
        return comment

    def get_comments_by_request_id(
        self, request_id: str, include_internal: bool = True
    ) -> list[RequestComment]:
        """Get comments of a request in creation order.

        Args:
            request_id: Request ID
            include_internal: If False, internal notes are filtered out
        """
        comments = self.db.list_comments(request_id)
        if include_internal:
            return comments
        return [comment for comment in comments if not comment.is_internal]
