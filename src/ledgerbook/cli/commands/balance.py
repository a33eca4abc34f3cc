"""Balance summary command."""

import click
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.balance import BalanceService


@click.command("balance")
@click.pass_context
def show_balance(ctx):
    """Show cash, bank and stock balances.

    Balances are computed from the opening balances and every live
    transaction; deleted transactions are ignored.
    """
    db = ctx.obj["db"]
    balances = BalanceService(db)

    cash = balances.compute_cash_balance()
    per_account = balances.compute_bank_balances()
    stock_value = balances.compute_stock_valuation()

    click.echo(f"Cash: {cash:,.2f}")
    for acc in BankAccountService(db, ctx.obj["identity"]).list_accounts():
        click.echo(f"Bank ({acc.name}): {per_account.get(acc.id, 0):,.2f}")
    click.echo(f"Bank total: {sum(per_account.values(), 0):,.2f}")
    click.echo(f"Stock value: {stock_value:,.2f}")


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(show_balance)
