"""Opening balance and opening stock commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.utils.amount_parser import parse_amount, parse_weight


@click.command("init")
@click.option("--cash", required=True, help="Opening cash amount")
@click.option(
    "--bank",
    "bank_balances",
    multiple=True,
    metavar="ACCOUNT=AMOUNT",
    help="Opening balance of a bank account (name or ID); repeatable",
)
@click.pass_context
def init_ledger(ctx, cash: str, bank_balances: tuple[str, ...]):
    """Set the opening cash and bank balances.

    This can be done only once; every transaction command requires it.

    Examples:
        ledgerbook init --cash 1000 --bank "Main Bank=500"
    """
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]
    account_service = BankAccountService(db, identity)

    try:
        cash_amount = parse_amount(cash)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    bank = {}
    for entry in bank_balances:
        account, sep, amount = entry.rpartition("=")
        if not sep or not account:
            click.echo(f"Error: Expected ACCOUNT=AMOUNT, got '{entry}'", err=True)
            ctx.exit(1)
        account_id = resolve_account_or_exit(ctx, account_service, account)
        try:
            bank[account_id] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        initial = LedgerService(db, identity).set_initial_balance(cash_amount, bank)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo("Initial balances set")
    click.echo(f"  Cash: {initial.cash:,.2f}")
    for account_id, amount in sorted(initial.bank.items()):
        account = account_service.get_account(account_id)
        click.echo(f"  {account.name}: {amount:,.2f}")


@click.group("opening-stock")
def opening_stock_group():
    """Manage stock held before the first recorded transaction."""
    pass


@opening_stock_group.command("add")
@click.argument("item_name")
@click.option("--weight", required=True, help="Weight in kg (e.g., 50, 12.5kg, 750g)")
@click.option("--price", required=True, help="Cost price per kg")
@click.pass_context
def add_opening_stock(ctx, item_name: str, weight: str, price: str):
    """Record opening stock of an item.

    Examples:
        ledgerbook opening-stock add Rice --weight 100 --price 18.50
    """
    try:
        item_weight = parse_weight(weight)
        item_price = parse_amount(price)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        item = LedgerService(ctx.obj["db"], ctx.obj["identity"]).add_initial_stock_item(
            item_name, item_weight, item_price
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added opening stock: {item.item_name} {item.weight}kg @ {item.price_per_kg:,.2f}/kg")


def register_commands(cli):
    """Register init commands with main CLI."""
    cli.add_command(init_ledger)
    cli.add_command(opening_stock_group)
