"""CLI helpers for request resolution."""

from __future__ import annotations

import click
from withdrawals.domain.entities import WithdrawalRequest
from withdrawals.domain.errors import request_not_found
from withdrawals.domain.workflow import WorkflowService


def resolve_request_or_exit(
    ctx: click.Context, service: WorkflowService, request: str
) -> WithdrawalRequest:
    """Resolve a request ID or reference number, or exit with a CLI error."""
    found = service.get_request(request)
    if found is None:
        matches = [r for r in service.search_requests(request) if r.ref_number == request]
        if len(matches) == 1:
            found = matches[0]
        elif len(matches) > 1:
            click.echo(
                f"Error: Reference '{request}' matches {len(matches)} requests; use the request ID",
                err=True,
            )
            ctx.exit(1)
    if found is None:
        click.echo(f"Error: {request_not_found(request)}", err=True)
        ctx.exit(1)
    return found
