"""Withdrawal request commands."""

import click
from withdrawals.cli.error_handling import handle_domain_error
from withdrawals.cli.request_resolution import resolve_request_or_exit
from withdrawals.cli.user_resolution import acting_user_or_exit
from withdrawals.domain.dashboard import DashboardService
from withdrawals.domain.entities import Currency, NewRequest, Priority, RequestStage
from withdrawals.domain.errors import DomainError
from withdrawals.domain.stages import stage_label, stage_progress
from withdrawals.domain.workflow import WorkflowService
from withdrawals.utils.amount_parser import parse_amount
from withdrawals.utils.date_parser import parse_date


def format_amount(amount, currency: Currency) -> str:
    return f"{currency.value} {amount:,.2f}"


def echo_request_row(req) -> None:
    click.echo(
        f"{req.ref_number:22s} | {req.beneficiary_name[:24]:24s} | {req.country:10s} | "
        f"{format_amount(req.amount, req.currency):>18s} | {req.value_date} | "
        f"{stage_label(req.current_stage):16s} | {req.priority.value}"
    )


@click.group()
def request_group():
    """Create and inspect withdrawal requests."""
    pass


@request_group.command("create")
@click.option("--beneficiary", required=True, help="Beneficiary name")
@click.option("--country", required=True, help="Beneficiary country")
@click.option("--amount", required=True, help="Amount (e.g., 100000 or '100,000.00')")
@click.option(
    "--currency",
    type=click.Choice([c.value for c in Currency], case_sensitive=False),
    default=Currency.USD.value,
    show_default=True,
    help="Currency",
)
@click.option("--value-date", required=True, help="Value date (YYYY-MM-DD or relative, e.g. 'in 3 days')")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority], case_sensitive=False),
    default=Priority.MEDIUM.value,
    show_default=True,
    help="Priority",
)
@click.option("--project-number", help="Project number (generated if omitted)")
@click.option("--ref-number", help="Reference number (generated if omitted)")
@click.option("--notes", help="Free-text notes")
@click.pass_context
def create_request(
    ctx,
    beneficiary: str,
    country: str,
    amount: str,
    currency: str,
    value_date: str,
    priority: str,
    project_number: str | None,
    ref_number: str | None,
    notes: str | None,
):
    """Create a withdrawal request in the Initial Review stage.

    Examples:
        withdrawals --user sara@example.com request create --beneficiary "Ministry of Finance" \\
            --country Egypt --amount 100000 --currency USD --value-date 2024-03-01
    """
    actor = acting_user_or_exit(ctx)
    service = WorkflowService(ctx.obj["db"])

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_date = parse_date(value_date)
    except ValueError as e:
        click.echo(f"Error: Invalid value date: {e}", err=True)
        ctx.exit(1)

    data = NewRequest(
        beneficiary_name=beneficiary,
        country=country,
        amount=parsed_amount,
        currency=currency,
        value_date=parsed_date,
        project_number=project_number,
        ref_number=ref_number,
        priority=priority,
        notes=notes,
    )
    try:
        created = service.create_request(data, actor)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created request {created.ref_number} (ID: {created.id})")
    click.echo(f"Stage: {stage_label(created.current_stage)}")


@request_group.command("list")
@click.option(
    "--stage",
    type=click.Choice([s.value for s in RequestStage]),
    help="Only requests in this stage",
)
@click.option("--country", help="Only requests for this country")
@click.option(
    "--priority",
    type=click.Choice([p.value for p in Priority]),
    help="Only requests with this priority",
)
@click.pass_context
def list_requests(ctx, stage: str | None, country: str | None, priority: str | None):
    """List withdrawal requests, newest first."""
    service = DashboardService(ctx.obj["db"])
    requests = service.list_requests(
        stage=RequestStage(stage) if stage else None,
        country=country,
        priority=Priority(priority) if priority else None,
    )
    if not requests:
        click.echo("No requests found.")
        return

    click.echo(f"\nFound {len(requests)} request(s):")
    click.echo("-" * 130)
    for req in requests:
        echo_request_row(req)


@request_group.command("search")
@click.argument("term")
@click.pass_context
def search_requests(ctx, term: str):
    """Search by reference number, project number, beneficiary or country."""
    service = WorkflowService(ctx.obj["db"])
    try:
        requests = service.search_requests(term)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not requests:
        click.echo(f"No requests match '{term}'.")
        return

    click.echo(f"\nFound {len(requests)} request(s):")
    click.echo("-" * 130)
    for req in requests:
        echo_request_row(req)


@request_group.command("show")
@click.argument("request", metavar="REQUEST")
@click.pass_context
def show_request(ctx, request: str):
    """Show a request with its workflow progress.

    REQUEST can be a request ID or reference number.
    """
    service = WorkflowService(ctx.obj["db"])
    req = resolve_request_or_exit(ctx, service, request)
    try:
        details = service.get_request_details(req.id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    req = details.request
    click.echo(f"\nRequest {req.ref_number} (ID: {req.id})")
    click.echo("=" * 60)
    click.echo(f"  Project:       {req.project_number}")
    click.echo(f"  Beneficiary:   {req.beneficiary_name}")
    click.echo(f"  Country:       {req.country}")
    click.echo(f"  Amount:        {format_amount(req.amount, req.currency)}")
    click.echo(f"  Value date:    {req.value_date}")
    click.echo(f"  Priority:      {req.priority.value}")
    click.echo(f"  Stage:         {stage_label(req.current_stage)}")
    click.echo(f"  Status:        {req.status}")
    click.echo(f"  Assigned to:   {req.assigned_to}")
    if req.current_stage == RequestStage.DISBURSED:
        click.echo(f"  Processing:    {req.processing_days} days")
    if req.notes:
        click.echo(f"  Notes:         {req.notes}")
    click.echo(f"  Comments:      {details.total_comments}")
    click.echo(f"  Last activity: {details.last_activity:%Y-%m-%d %H:%M}")

    progress = stage_progress(req)
    click.echo(f"\nProgress: {progress.percentage:.0f}%")
    for step, status in progress.steps:
        marker = {"completed": "[x]", "current": "[>]"}.get(status, "[ ]")
        click.echo(f"  {marker} {step.team:16s} {step.description}")


def register_commands(cli):
    """Register request commands with main CLI."""
    cli.add_command(request_group, name="request")
