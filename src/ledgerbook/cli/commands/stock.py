"""Stock transaction commands."""

import click
from ledgerbook.cli.account_resolution import resolve_account_or_exit
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.entities import PaymentMethod, StockKind
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.utils.amount_parser import parse_amount, parse_weight
from ledgerbook.utils.date_parser import parse_date


@click.group("stock")
def stock_group():
    """Record stock purchases and sales."""
    pass


@stock_group.command("add")
@click.argument("item_name")
@click.option("--kind", type=click.Choice([k.value for k in StockKind]), required=True)
@click.option("--weight", required=True, help="Weight in kg (e.g., 50, 12.5kg, 750g)")
@click.option("--price", required=True, help="Price per kg")
@click.option("--pay", "payment_method", type=click.Choice([p.value for p in PaymentMethod]), default="cash", show_default=True)
@click.option("--account", help="Bank account name or ID (required with --pay bank)")
@click.option("--date", default="today", show_default=True, help="Transaction date")
@click.option("--description", help="Transaction description")
@click.pass_context
def add_stock(
    ctx,
    item_name: str,
    kind: str,
    weight: str,
    price: str,
    payment_method: str,
    account: str | None,
    date: str,
    description: str | None,
):
    """Record a stock purchase or sale.

    The money side is booked automatically to cash or the bank account.

    Examples:
        ledgerbook stock add Rice --kind purchase --weight 50 --price 20
        ledgerbook stock add Rice --kind sale --weight 20 --price 25 --pay bank --account "Main Bank"
    """
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, BankAccountService(db, identity), account)

    try:
        txn_date = parse_date(date)
        txn_weight = parse_weight(weight)
        txn_price = parse_amount(price)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        txn = LedgerService(db, identity).record_stock(
            txn_date,
            item_name,
            txn_weight,
            txn_price,
            kind,
            payment_method,
            bank_account_id=account_id,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created stock transaction {txn.id}")
    click.echo(f"  {txn.kind.value.capitalize()}: {txn.item_name} {txn.weight}kg @ {txn.price_per_kg:,.2f}/kg")
    click.echo(f"  Total: {txn.total:,.2f} ({txn.payment_method.value})")


@stock_group.command("positions")
@click.pass_context
def stock_positions(ctx):
    """Show held quantity and value per item."""
    service = BalanceService(ctx.obj["db"])
    positions = service.list_stock_positions()
    if not positions:
        click.echo("No stock held.")
        return

    click.echo(f"{'Item':20s} | {'Quantity (kg)':>14s} | {'Avg cost':>10s} | {'Value':>12s}")
    click.echo("-" * 66)
    for pos in positions:
        click.echo(f"{pos.item_name:20s} | {pos.quantity:>14} | {pos.average_cost:>10,.2f} | {pos.value:>12,.2f}")
    click.echo("-" * 66)
    click.echo(f"Total stock value: {service.compute_stock_valuation():,.2f}")


def register_commands(cli):
    """Register stock commands with main CLI."""
    cli.add_command(stock_group)
