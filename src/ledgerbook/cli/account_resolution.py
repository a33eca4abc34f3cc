"""CLI helpers for bank account resolution."""

from __future__ import annotations

import click
from ledgerbook.domain.account import BankAccountService
from ledgerbook.utils.account_resolver import resolve_bank_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: BankAccountService, account: str | int
) -> int:
    """Resolve bank account name or ID, or exit with a CLI error."""
    try:
        return resolve_bank_account(account_service, account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
