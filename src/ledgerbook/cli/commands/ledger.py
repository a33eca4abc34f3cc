"""Cash and bank transaction commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.entities import BankDirection, CashDirection
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.utils.amount_parser import parse_amount
from ledgerbook.utils.date_parser import parse_date

DATE_HELP = "Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')"


def _parse_date_amount(ctx, date: str, amount: str):
    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    return txn_date, txn_amount


@click.group("cash")
def cash_group():
    """Record cash transactions."""
    pass


@cash_group.command("add")
@click.option("--date", default="today", show_default=True, help=DATE_HELP)
@click.option("--amount", required=True, help="Amount, always positive (e.g., 123.45)")
@click.option("--direction", type=click.Choice([d.value for d in CashDirection]), required=True)
@click.option("--category", required=True, help="Cash category name")
@click.option("--description", default="", help="Transaction description")
@click.pass_context
def add_cash(ctx, date: str, amount: str, direction: str, category: str, description: str):
    """Record a cash income or expense.

    Examples:
        ledgerbook cash add --amount 200 --direction expense --category Rent
    """
    txn_date, txn_amount = _parse_date_amount(ctx, date, amount)
    service = LedgerService(ctx.obj["db"], ctx.obj["identity"])
    try:
        txn = service.record_cash(txn_date, txn_amount, direction, category, description)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created cash transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.signed_amount:,.2f}")
    click.echo(f"  Category: {txn.category}")


@click.group("bank")
def bank_group():
    """Record bank transactions."""
    pass


@bank_group.command("add")
@click.option("--account", required=True, help="Bank account name or ID")
@click.option("--date", default="today", show_default=True, help=DATE_HELP)
@click.option("--amount", required=True, help="Amount, always positive (e.g., 123.45)")
@click.option("--direction", type=click.Choice([d.value for d in BankDirection]), required=True)
@click.option("--category", required=True, help="Bank category name")
@click.option("--description", default="", help="Transaction description")
@click.pass_context
def add_bank(
    ctx, account: str, date: str, amount: str, direction: str, category: str, description: str
):
    """Record a bank deposit or withdrawal.

    Examples:
        ledgerbook bank add --account "Main Bank" --amount 300 --direction deposit --category Sales
    """
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]
    account_id = resolve_account_or_exit(ctx, BankAccountService(db, identity), account)
    txn_date, txn_amount = _parse_date_amount(ctx, date, amount)
    try:
        txn = LedgerService(db, identity).record_bank(
            txn_date, txn_amount, direction, account_id, category, description
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created bank transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.signed_amount:,.2f}")
    click.echo(f"  Category: {txn.category}")


def register_commands(cli):
    """Register cash and bank commands with main CLI."""
    cli.add_command(cash_group)
    cli.add_command(bank_group)
