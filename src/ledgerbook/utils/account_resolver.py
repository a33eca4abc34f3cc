"""Utility for resolving bank account names to IDs."""

from ledgerbook.domain.account import BankAccountService


def resolve_bank_account(account_service: BankAccountService, account: str | int) -> int:
    """Resolve bank account name or ID to account ID.

    A name match wins over an ID, so an account called "2" stays reachable.

    Args:
        account_service: BankAccountService instance
        account: Account name, or ID as int or digit string

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found
    """
    if isinstance(account, str):
        for acc in account_service.list_accounts():
            if acc.name == account:
                return acc.id

    try:
        account_id = int(account)
    except (ValueError, TypeError):
        raise ValueError(f"Bank account '{account}' not found")

    if account_service.get_account(account_id) is None:
        raise ValueError(f"Bank account ID {account_id} not found")
    return account_id
