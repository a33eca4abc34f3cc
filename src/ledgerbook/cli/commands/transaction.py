"""Transaction listing, soft delete and restore commands."""

import click
from ledgerbook.cli.error_handling import handle_domain_error
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.entities import TransactionKind
from ledgerbook.domain.ledger import LedgerService

KIND_CHOICE = click.Choice([k.value for k in TransactionKind])


def _describe(kind: TransactionKind, txn, account_names: dict[int, str]) -> str:
    if kind == TransactionKind.STOCK:
        paid = txn.payment_method.value
        if txn.bank_account_id is not None:
            paid = account_names.get(txn.bank_account_id, str(txn.bank_account_id))
        return (
            f"{txn.kind.value:8s} | {txn.item_name:15s} | {txn.weight:>9}kg @ "
            f"{txn.price_per_kg:,.2f} | {txn.total:>12,.2f} | {paid}"
        )
    line = f"{txn.signed_amount:>12,.2f} | {txn.category:18s} | {txn.description}"
    if kind == TransactionKind.BANK:
        line = f"{account_names.get(txn.bank_account_id, txn.bank_account_id)} | " + line
    return line


@click.group("transaction")
def transaction_group():
    """List, delete and restore transactions."""
    pass


@transaction_group.command("list")
@click.argument("kind", type=KIND_CHOICE)
@click.option("--all", "include_deleted", is_flag=True, help="Include deleted transactions")
@click.pass_context
def list_transactions(ctx, kind: str, include_deleted: bool):
    """List cash, bank or stock transactions by date.

    Examples:
        ledgerbook transaction list cash
        ledgerbook transaction list stock --all
    """
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]
    kind = TransactionKind(kind)
    transactions = LedgerService(db, identity).list_transactions(kind, include_deleted=include_deleted)
    if not transactions:
        click.echo(f"No {kind.value} transactions found.")
        return

    accounts = {acc.id: acc.name for acc in BankAccountService(db, identity).list_accounts()}
    for txn in transactions:
        marker = " (deleted)" if txn.deleted_at is not None else ""
        click.echo(f"{txn.id:5d} | {txn.date} | {_describe(kind, txn, accounts)}{marker}")


@transaction_group.command("delete")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, kind: str, transaction_id: int):
    """Move a transaction to the recycle bin.

    Deleting a stock transaction also deletes its cash or bank payment;
    deleting one side of a transfer deletes both sides.
    """
    service = LedgerService(ctx.obj["db"], ctx.obj["identity"])
    try:
        changed = service.soft_delete(kind, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if changed:
        click.echo(f"Deleted {kind} transaction {transaction_id}")
    else:
        click.echo(f"{kind.capitalize()} transaction {transaction_id} is already deleted")


@transaction_group.command("restore")
@click.argument("kind", type=KIND_CHOICE)
@click.argument("transaction_id", type=int)
@click.pass_context
def restore_transaction(ctx, kind: str, transaction_id: int):
    """Restore a transaction from the recycle bin."""
    service = LedgerService(ctx.obj["db"], ctx.obj["identity"])
    try:
        changed = service.restore(kind, transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if changed:
        click.echo(f"Restored {kind} transaction {transaction_id}")
    else:
        click.echo(f"{kind.capitalize()} transaction {transaction_id} is not deleted")


@transaction_group.command("bin")
@click.option("--kind", type=KIND_CHOICE, help="Only show one kind")
@click.pass_context
def recycle_bin(ctx, kind: str | None):
    """List deleted transactions, most recently deleted first."""
    db = ctx.obj["db"]
    identity = ctx.obj["identity"]
    deleted = LedgerService(db, identity).list_deleted(kind)
    if not deleted:
        click.echo("Recycle bin is empty.")
        return

    accounts = {acc.id: acc.name for acc in BankAccountService(db, identity).list_accounts()}
    for each_kind, txn in deleted:
        click.echo(
            f"{each_kind.value:5s} {txn.id:5d} | deleted {txn.deleted_at:%Y-%m-%d %H:%M} | "
            f"{txn.date} | {_describe(each_kind, txn, accounts)}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group)
