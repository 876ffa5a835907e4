"""User management commands."""

import click
from withdrawals.cli.error_handling import handle_domain_error
from withdrawals.domain.entities import UserRole
from withdrawals.domain.errors import DomainError
from withdrawals.domain.permissions import ROLE_DISPLAY_NAMES
from withdrawals.domain.users import UserService


@click.group()
def user_group():
    """Manage workflow users."""
    pass


@user_group.command("add")
@click.argument("name", metavar="NAME")
@click.argument("email", metavar="EMAIL")
@click.option(
    "--role",
    required=True,
    help="Workflow role (" + ", ".join(role.value for role in UserRole) + ")",
)
@click.option("--can-create", is_flag=True, help="Allow the user to create and submit requests")
@click.option("--view-only", is_flag=True, help="Restrict the user to viewing")
@click.pass_context
def add_user(ctx, name: str, email: str, role: str, can_create: bool, view_only: bool):
    """Add a user.

    Directory role names such as 'head_of_operations' are mapped onto the
    workflow roles.

    Examples:
        withdrawals user add "Sara Ali" sara@example.com --role archive_team --can-create
        withdrawals user add "Omar Khan" omar@example.com --role operations_team
    """
    service = UserService(ctx.obj["db"])
    try:
        created = service.create_user(
            name=name,
            email=email,
            role=role,
            can_create_requests=can_create,
            view_only_access=view_only,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user '{created.name}' (ID: {created.id})")
    click.echo(f"Role: {ROLE_DISPLAY_NAMES[created.role]}")


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])
    users = service.list_users()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 90)
    for u in users:
        flags = []
        if u.can_create_requests:
            flags.append("create")
        if u.view_only_access:
            flags.append("view-only")
        click.echo(
            f"{u.id:32s} | {u.name:20s} | {u.email:25s} | {u.role.value}"
            + (f" [{', '.join(flags)}]" if flags else "")
        )


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
