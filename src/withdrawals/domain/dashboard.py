"""Dashboard statistics domain service."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from withdrawals.domain.entities import (
    DashboardStats,
    Priority,
    RequestStage,
    WithdrawalRequest,
)
from withdrawals.domain.timeline import utc_now

if TYPE_CHECKING:
    from withdrawals.database.base import Database

DUE_SOON_DAYS = 3


def is_due_soon(request: WithdrawalRequest, today: date) -> bool:
    """Value date within the due-soon window (overdue included), not disbursed."""
    if request.current_stage == RequestStage.DISBURSED:
        return False
    return (request.value_date - today).days <= DUE_SOON_DAYS


def compute_stats(requests: Sequence[WithdrawalRequest], today: date) -> DashboardStats:
    """Compute dashboard statistics from a snapshot of requests.

    Args:
        requests: Snapshot of all requests
        today: Reference date for the due-soon window

    Returns:
        DashboardStats
    """
    by_stage = {stage: 0 for stage in RequestStage}
    by_priority = {priority: 0 for priority in Priority}
    disbursed_days = []
    due_soon = 0

    for request in requests:
        by_stage[request.current_stage] += 1
        by_priority[request.priority] += 1
        if request.current_stage == RequestStage.DISBURSED:
            disbursed_days.append(request.processing_days)
        if is_due_soon(request, today):
            due_soon += 1

    avg_processing_time = 0
    if disbursed_days:
        average = Decimal(sum(disbursed_days)) / len(disbursed_days)
        avg_processing_time = int(average.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return DashboardStats(
        total_requests=len(requests),
        pending_requests=len(requests) - by_stage[RequestStage.DISBURSED],
        avg_processing_time=avg_processing_time,
        due_soon=due_soon,
        by_stage=by_stage,
        by_priority=by_priority,
    )


def filter_requests(
    requests: Sequence[WithdrawalRequest],
    stage: Optional[RequestStage] = None,
    country: Optional[str] = None,
    priority: Optional[Priority] = None,
) -> list[WithdrawalRequest]:
    """Filter requests by stage, country (case-insensitive) and priority."""
    filtered = list(requests)
    if stage is not None:
        filtered = [req for req in filtered if req.current_stage == stage]
    if country is not None:
        filtered = [req for req in filtered if req.country.lower() == country.lower()]
    if priority is not None:
        filtered = [req for req in filtered if req.priority == priority]
    return filtered


class DashboardService:
    """Service for read-side dashboard statistics.

    Nothing is cached: every call recomputes from the current snapshot.
    """

    def __init__(self, db: Database, clock: Optional[Callable[[], datetime]] = None):
        """Initialize dashboard service.

        Args:
            db: Database instance
            clock: Returns the current (timezone-aware) time
        """
        self.db = db
        self.clock = clock or utc_now

    def get_stats(self) -> DashboardStats:
        """Compute statistics over all requests."""
        return compute_stats(self.db.list_requests(), self.clock().date())

    def list_requests(
        self,
        stage: Optional[RequestStage] = None,
        country: Optional[str] = None,
        priority: Optional[Priority] = None,
    ) -> list[WithdrawalRequest]:
        """List requests with optional filters, newest first."""
        return filter_requests(self.db.list_requests(), stage=stage, country=country, priority=priority)

    def list_due_soon(self) -> list[WithdrawalRequest]:
        """List requests in the due-soon set, earliest value date first."""
        today = self.clock().date()
        due = [req for req in self.db.list_requests() if is_due_soon(req, today)]
        return sorted(due, key=lambda req: req.value_date)
