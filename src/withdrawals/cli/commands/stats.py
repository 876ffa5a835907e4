"""Dashboard statistics command."""

import click
from withdrawals.domain.dashboard import DashboardService
from withdrawals.domain.stages import stage_label


@click.command("stats")
@click.option("--due-soon", "show_due", is_flag=True, help="List the requests that are due soon")
@click.pass_context
def show_stats(ctx, show_due: bool):
    """Show dashboard statistics over all requests."""
    service = DashboardService(ctx.obj["db"])
    stats = service.get_stats()

    click.echo("\nDashboard")
    click.echo("=" * 40)
    click.echo(f"Total requests:       {stats.total_requests}")
    click.echo(f"Pending requests:     {stats.pending_requests}")
    click.echo(f"Avg processing time:  {stats.avg_processing_time} days")
    click.echo(f"Due soon:             {stats.due_soon}")

    click.echo("\nBy stage:")
    for stage, count in stats.by_stage.items():
        click.echo(f"  {stage_label(stage):18s} {count}")

    click.echo("\nBy priority:")
    for priority, count in stats.by_priority.items():
        click.echo(f"  {priority.value:18s} {count}")

    if show_due:
        due = service.list_due_soon()
        click.echo("\nDue soon:")
        if not due:
            click.echo("  None")
        for req in due:
            click.echo(f"  {req.value_date} | {req.ref_number} | {stage_label(req.current_stage)}")


def register_commands(cli):
    """Register stats command with main CLI."""
    cli.add_command(show_stats, name="stats")
