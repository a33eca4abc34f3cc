"""Bank account management commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.balance import BalanceService


@click.group("account")
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.pass_context
def create_account(ctx, name: str):
    """Create a new bank account.

    Examples:
        ledgerbook account create "Main Bank"
    """
    service = BankAccountService(ctx.obj["db"], ctx.obj["identity"])
    try:
        account_id = service.create_account(name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created bank account '{name.strip()}' (ID: {account_id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all bank accounts with their balances."""
    db = ctx.obj["db"]
    service = BankAccountService(db, ctx.obj["identity"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No bank accounts found.")
        return

    balances = BalanceService(db).compute_bank_balances()
    click.echo("\nBank accounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Balance: {balances.get(acc.id, 0):,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group)
