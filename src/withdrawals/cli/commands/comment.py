"""Comment commands."""

import click
from withdrawals.cli.error_handling import handle_domain_error
from withdrawals.cli.request_resolution import resolve_request_or_exit
from withdrawals.cli.user_resolution import acting_user_or_exit
from withdrawals.domain.comments import CommentService
from withdrawals.domain.errors import DomainError
from withdrawals.domain.workflow import WorkflowService


@click.group()
def comment_group():
    """Add and list request comments."""
    pass


@comment_group.command("add")
@click.argument("request", metavar="REQUEST")
@click.argument("text", metavar="TEXT")
@click.option("--mention", "mentions", multiple=True, help="User ID to mention (repeatable)")
@click.option("--internal", is_flag=True, help="Mark as internal note")
@click.pass_context
def add_comment(ctx, request: str, text: str, mentions: tuple[str, ...], internal: bool):
    """Add a comment to a request.

    Examples:
        withdrawals comment add WR-00001 "Beneficiary IBAN verified"
        withdrawals comment add WR-00001 "Please check the agreement" --mention 00000002 --internal
    """
    actor = acting_user_or_exit(ctx)
    db = ctx.obj["db"]
    req = resolve_request_or_exit(ctx, WorkflowService(db), request)
    service = CommentService(db)
    try:
        comment = service.add_comment(
            req.id, actor, text, mentioned_users=list(mentions), is_internal=internal
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added comment {comment.id} to request {req.ref_number}")


@comment_group.command("list")
@click.argument("request", metavar="REQUEST")
@click.option("--public", is_flag=True, help="Hide internal notes")
@click.pass_context
def list_comments(ctx, request: str, public: bool):
    """List comments of a request, oldest first."""
    db = ctx.obj["db"]
    req = resolve_request_or_exit(ctx, WorkflowService(db), request)
    comments = CommentService(db).get_comments_by_request_id(req.id, include_internal=not public)
    if not comments:
        click.echo("No comments found.")
        return

    for c in comments:
        label = " (internal)" if c.is_internal else ""
        click.echo(f"\n{c.user_name}{label} - {c.created_at:%Y-%m-%d %H:%M}")
        click.echo(f"  {c.comment_text}")
        if c.mentioned_users:
            click.echo(f"  Mentions: {', '.join(c.mentioned_users)}")


def register_commands(cli):
    """Register comment commands with main CLI."""
    cli.add_command(comment_group, name="comment")
