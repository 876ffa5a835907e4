"""CLI helpers for acting-user resolution."""

from __future__ import annotations

import click
from withdrawals.domain.entities import User
from withdrawals.domain.errors import NotFoundError
from withdrawals.domain.users import UserService
from withdrawals.utils.user_resolver import resolve_user


def acting_user_or_exit(ctx: click.Context) -> User:
    """Resolve the --user option, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    identifier = ctx.obj.get("user")
    if not identifier:
        click.echo("Error: No acting user. Pass --user or set WITHDRAWALS_USER.", err=True)
        ctx.exit(1)
    try:
        return resolve_user(UserService(ctx.obj["db"]), identifier)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
