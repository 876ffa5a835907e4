"""CLI error handling helpers."""

import click

from withdrawals.domain.errors import DomainError, PermissionDenied


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, PermissionDenied):
        click.echo(f"Error: Permission denied. {error}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
