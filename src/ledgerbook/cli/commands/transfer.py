"""Transfer command."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.entities import TransferDirection
from ledgerbook.domain.transfer import TransferService
from ledgerbook.utils.amount_parser import parse_amount
from ledgerbook.utils.date_parser import parse_date


@click.command("transfer")
@click.argument("direction", type=click.Choice([d.value for d in TransferDirection]))
@click.option("--account", required=True, help="Bank account name or ID")
@click.option("--amount", required=True, help="Amount to move")
@click.option("--date", default="today", show_default=True, help="Transfer date")
@click.option("--description", help="Note stored on both sides")
@click.pass_context
def transfer_funds(ctx, direction: str, account: str, amount: str, date: str, description: str | None):
    """Move money between cash and a bank account.

    DIRECTION is cash_to_bank or bank_to_cash.

    Examples:
        ledgerbook transfer cash_to_bank --account "Main Bank" --amount 100
    """
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]
    account_id = resolve_account_or_exit(ctx, BankAccountService(db, identity), account)

    try:
        txn_date = parse_date(date)
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        result = TransferService(db, identity).transfer(
            direction, txn_amount, txn_date, account_id, description
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Transferred {result.amount:,.2f} ({result.direction.value})")
    click.echo(f"  Cash transaction: {result.cash_transaction.id}")
    click.echo(f"  Bank transaction: {result.bank_transaction.id}")


def register_commands(cli):
    """Register transfer command with main CLI."""
    cli.add_command(transfer_funds)
