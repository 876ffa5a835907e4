"""Domain layer for the withdrawal workflow."""

from withdrawals.domain.workflow import WorkflowService
from withdrawals.domain.timeline import TimelineService
from withdrawals.domain.comments import CommentService
from withdrawals.domain.dashboard import DashboardService
from withdrawals.domain.users import UserService
from withdrawals.domain.async_workflow import AsyncWorkflowService

__all__ = [
    "WorkflowService",
    "TimelineService",
    "CommentService",
    "DashboardService",
    "UserService",
    "AsyncWorkflowService",
]
