"""Main CLI entry point."""

import click
from withdrawals.config import DB_PATH_ENV, LOG_LEVEL_ENV, USER_ENV, configure_logging, load_settings
from withdrawals.database.factories import create_sqlite_database
from withdrawals.domain.errors import DomainError
from withdrawals.cli.error_handling import handle_domain_error

# Import and register all commands at module level
from withdrawals.cli.commands import (
    user,
    request,
    workflow,
    comment,
    timeline,
    stats,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--user",
    "acting_user",
    help=f"Acting user ID or email (overrides {USER_ENV} environment variable)",
    envvar=USER_ENV,
)
@click.option(
    "--log-level",
    help=f"Logging level (overrides {LOG_LEVEL_ENV} environment variable)",
    envvar=LOG_LEVEL_ENV,
)
@click.pass_context
def cli(ctx, db_path: str | None, acting_user: str | None, log_level: str | None):
    """Withdrawals - Withdrawal request approval workflow.

    Track withdrawal requests through Archive, Operations, Core Banking and
    disbursement, with role-based permissions, an audit timeline and
    comments.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            settings = load_settings()
            configure_logging(log_level or settings.log_level)
            db = create_sqlite_database(database_path=db_path, timeout=settings.storage_timeout)
            db.connect()
            db.initialize_schema()
        except DomainError as e:
            handle_domain_error(ctx, e)
        ctx.obj["db"] = db
        ctx.obj["user"] = acting_user
        ctx.call_on_close(db.disconnect)


# Register all commands
user.register_commands(cli)
request.register_commands(cli)
workflow.register_commands(cli)
comment.register_commands(cli)
timeline.register_commands(cli)
stats.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
