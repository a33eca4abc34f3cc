"""Main CLI entry point."""

import logging

import click
from ledgerbook.cli.logging_setup import setup_logging, teardown_logging
from ledgerbook.database.factories import create_sqlite_database
from ledgerbook.domain.entities import Role
from ledgerbook.domain.identity import StaticIdentityProvider

# Import and register all commands at module level
from ledgerbook.cli.commands import (
    account,
    activity,
    backup,
    balance,
    category,
    init,
    ledger,
    stock,
    transaction,
    transfer,
    vendor,
)

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERBOOK_DB_PATH environment variable)",
    envvar="LEDGERBOOK_DB_PATH",
)
@click.option(
    "--actor",
    default="admin",
    show_default=True,
    envvar="LEDGERBOOK_ACTOR",
    help="Name recorded in the activity log",
)
@click.option(
    "--role",
    type=click.Choice([role.value for role in Role]),
    default=Role.ADMIN.value,
    show_default=True,
    envvar="LEDGERBOOK_ROLE",
    help="Role of the actor; deleting, restoring and importing need admin",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, actor: str, role: str, verbose: bool):
    """Ledgerbook - cash, bank and stock bookkeeping.

    Record cash and bank transactions, stock purchases and sales, and
    transfers between cash and bank. Balances are always derived from the
    recorded transactions.
    """
    ctx.ensure_object(dict)
    handler = setup_logging(verbose)
    ctx.call_on_close(lambda: teardown_logging(handler))

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["identity"] = StaticIdentityProvider(actor, role=role)
        ctx.call_on_close(db.disconnect)
        logger.debug("Using database %s as %s (%s)", db_path or "default", actor, role)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
vendor.register_commands(cli)
init.register_commands(cli)
ledger.register_commands(cli)
stock.register_commands(cli)
transfer.register_commands(cli)
transaction.register_commands(cli)
balance.register_commands(cli)
backup.register_commands(cli)
activity.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
