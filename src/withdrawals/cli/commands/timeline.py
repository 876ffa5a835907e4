"""Timeline commands."""

import click
from withdrawals.cli.request_resolution import resolve_request_or_exit
from withdrawals.domain.stages import WORKFLOW_STEPS, events_for_stage
from withdrawals.domain.timeline import TimelineService
from withdrawals.domain.workflow import WorkflowService


def _echo_event(event) -> None:
    click.echo(f"  {event.created_at:%Y-%m-%d %H:%M} | {event.event_type.value:18s} | {event.title}")
    click.echo(f"      {event.description} ({event.user_name})")


@click.command("timeline")
@click.argument("request", metavar="REQUEST")
@click.option("--by-stage", is_flag=True, help="Group events by workflow stage")
@click.option("--reverse", is_flag=True, help="Newest events first")
@click.pass_context
def show_timeline(ctx, request: str, by_stage: bool, reverse: bool):
    """Show the audit timeline of a request.

    REQUEST can be a request ID or reference number.
    """
    db = ctx.obj["db"]
    req = resolve_request_or_exit(ctx, WorkflowService(db), request)
    service = TimelineService(db)
    events = service.get_timeline_by_request_id(req.id)
    stats = service.get_timeline_stats(req.id)

    click.echo(f"\nTimeline for {req.ref_number}: {stats.event_count} event(s)")
    if stats.last_activity is not None:
        click.echo(f"Last activity: {stats.last_activity:%Y-%m-%d %H:%M}")

    if by_stage:
        for step in WORKFLOW_STEPS:
            stage_events = events_for_stage(events, step.stage)
            click.echo(f"\n{step.team} ({step.short_name}): {len(stage_events)} event(s)")
            for event in stage_events:
                _echo_event(event)
        return

    click.echo("-" * 80)
    for event in reversed(events) if reverse else events:
        _echo_event(event)


def register_commands(cli):
    """Register timeline commands with main CLI."""
    cli.add_command(show_timeline, name="timeline")
