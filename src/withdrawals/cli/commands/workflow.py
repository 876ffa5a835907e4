"""Workflow transition commands."""

import click
from withdrawals.cli.error_handling import handle_domain_error
from withdrawals.cli.request_resolution import resolve_request_or_exit
from withdrawals.cli.user_resolution import acting_user_or_exit
from withdrawals.domain.errors import DomainError
from withdrawals.domain.stages import stage_label
from withdrawals.domain.workflow import WorkflowService


def _run_transition(ctx, request: str, operation: str, verb: str, **kwargs):
    actor = acting_user_or_exit(ctx)
    service = WorkflowService(ctx.obj["db"])
    req = resolve_request_or_exit(ctx, service, request)
    try:
        updated = getattr(service, operation)(req.id, actor, **kwargs)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"{verb} request {updated.ref_number}")
    click.echo(f"Stage: {stage_label(updated.current_stage)}")
    click.echo(f"Status: {updated.status}")
    return updated


@click.command("submit")
@click.argument("request", metavar="REQUEST")
@click.option("--comment", help="Comment recorded on the timeline")
@click.pass_context
def submit_request(ctx, request: str, comment: str | None):
    """Forward a request from Initial Review to Technical Review.

    REQUEST can be a request ID or reference number.
    """
    _run_transition(ctx, request, "submit_for_review", "Submitted", comment=comment)


@click.command("approve")
@click.argument("request", metavar="REQUEST")
@click.option("--comment", help="Comment recorded on the timeline")
@click.pass_context
def approve_request(ctx, request: str, comment: str | None):
    """Approve a request in Technical Review (moves it to Core Banking).

    REQUEST can be a request ID or reference number.
    """
    _run_transition(ctx, request, "approve", "Approved", comment=comment)


@click.command("reject")
@click.argument("request", metavar="REQUEST")
@click.option("--comment", help="Reason recorded on the timeline")
@click.pass_context
def reject_request(ctx, request: str, comment: str | None):
    """Reject a request in Technical Review (returns it to Initial Review).

    REQUEST can be a request ID or reference number.
    """
    _run_transition(ctx, request, "reject", "Rejected", comment=comment)


@click.command("disburse")
@click.argument("request", metavar="REQUEST")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def disburse_request(ctx, request: str, yes: bool):
    """Mark a request in Core Banking as disbursed.

    This action cannot be undone.

    REQUEST can be a request ID or reference number.
    """
    if not yes and not click.confirm(
        f"Are you sure you want to mark {request} as disbursed? This action cannot be undone."
    ):
        click.echo("Disbursement cancelled.")
        return
    updated = _run_transition(ctx, request, "disburse", "Disbursed")
    click.echo(f"Processing time: {updated.processing_days} days")


def register_commands(cli):
    """Register workflow commands with main CLI."""
    cli.add_command(submit_request, name="submit")
    cli.add_command(approve_request, name="approve")
    cli.add_command(reject_request, name="reject")
    cli.add_command(disburse_request, name="disburse")
