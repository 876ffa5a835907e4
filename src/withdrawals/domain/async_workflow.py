"""Coroutine facade over the workflow services.

Each call runs the synchronous service in a worker thread so callers such
as an event loop are never blocked, and is bounded by ``timeout``. On
expiry the caller gets ``StorageUnavailable`` and the abandoned worker is
refused its write, so a reported failure never leaves a change behind. A
worker whose write had already begun is awaited and its result returned.
"""

import asyncio
from typing import Any, Callable, Optional, Sequence

from withdrawals.domain.comments import CommentService
from withdrawals.domain.dashboard import DashboardService
from withdrawals.domain.entities import (
    DashboardStats,
    NewRequest,
    RequestComment,
    RequestDetails,
    TimelineEvent,
    User,
    WithdrawalRequest,
)
from withdrawals.domain.errors import StorageUnavailable, storage_timeout
from withdrawals.domain.workflow import WorkflowService
from withdrawals.domain.write_gate import WriteGate, current_gate

DEFAULT_TIMEOUT = 10.0


def _discard_result(task: "asyncio.Future") -> None:
    if not task.cancelled():
        task.exception()


class AsyncWorkflowService:
    """Async access to workflow, comment and dashboard operations."""

    def __init__(
        self,
        workflow: WorkflowService,
        comments: Optional[CommentService] = None,
        dashboard: Optional[DashboardService] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.workflow = workflow
        self.comments = comments or CommentService(
            workflow.db,
            timeline=workflow.timeline,
            id_generator=workflow.id_generator,
            clock=workflow.clock,
        )
        self.dashboard = dashboard or DashboardService(workflow.db, clock=workflow.clock)
        self.timeout = timeout

    async def _run(self, operation: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        gate = WriteGate()
        token = current_gate.set(gate)
        try:
            # The task copies the context, so the worker thread sees this gate
            worker = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
        finally:
            current_gate.reset(token)
        try:
            return await asyncio.wait_for(asyncio.shield(worker), timeout=self.timeout)
        except asyncio.TimeoutError:
            if gate.close():
                # The write is already under way; its outcome is the caller's
                return await worker
            worker.add_done_callback(_discard_result)
            raise StorageUnavailable(storage_timeout(operation, self.timeout)) from None
        except asyncio.CancelledError:
            gate.close()
            raise

    async def create_request(self, data: NewRequest, actor: User) -> WithdrawalRequest:
        return await self._run("create_request", self.workflow.create_request, data, actor)

    async def submit_for_review(
        self, request_id: str, actor: User, comment: Optional[str] = None
    ) -> WithdrawalRequest:
        return await self._run(
            "submit_for_review", self.workflow.submit_for_review, request_id, actor, comment
        )

    async def approve(self, request_id: str, actor: User, comment: Optional[str] = None) -> WithdrawalRequest:
        return await self._run("approve", self.workflow.approve, request_id, actor, comment)

    async def reject(self, request_id: str, actor: User, comment: Optional[str] = None) -> WithdrawalRequest:
        return await self._run("reject", self.workflow.reject, request_id, actor, comment)

    async def disburse(self, request_id: str, actor: User) -> WithdrawalRequest:
        return await self._run("disburse", self.workflow.disburse, request_id, actor)

    async def get_request(self, request_id: str) -> Optional[WithdrawalRequest]:
        return await self._run("get_request", self.workflow.get_request, request_id)

    async def get_request_details(self, request_id: str) -> RequestDetails:
        return await self._run("get_request_details", self.workflow.get_request_details, request_id)

    async def get_timeline(self, request_id: str) -> list[TimelineEvent]:
        return await self._run(
            "get_timeline", self.workflow.timeline.get_timeline_by_request_id, request_id
        )

    async def add_comment(
        self,
        request_id: str,
        author: User,
        comment_text: str,
        mentioned_users: Optional[Sequence[str]] = None,
        is_internal: bool = False,
    ) -> RequestComment:
        return await self._run(
            "add_comment",
            self.comments.add_comment,
            request_id,
            author,
            comment_text,
            mentioned_users,
            is_internal,
        )

    async def get_stats(self) -> DashboardStats:
        return await self._run("get_stats", self.dashboard.get_stats)
