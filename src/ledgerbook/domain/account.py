"""Bank account domain service."""

from typing import Optional

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.entities import BankAccount
from ledgerbook.domain.errors import ConflictError, ValidationError, account_not_found, NotFoundError
from ledgerbook.domain.identity import IdentityProvider


class BankAccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        """Initialize bank account service.

        Args:
            db: Record store instance
            identity: Provider of the acting user
        """
        self.db = db
        self.identity = identity
        self.activity = ActivityLogService(db)

    def create_account(self, name: str) -> int:
        """Create a new bank account.

        Args:
            name: Account display name

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name is required", field="name")

        # Check if account with same name exists
        for acc in self.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        account = self.db.create(Collection.BANK_ACCOUNTS, BankAccount(id=None, name=name))
        self.activity.record(self.identity.current_actor(), f"Added bank account: {name}")
        return account.id

    def get_account(self, account_id: int) -> Optional[BankAccount]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get(Collection.BANK_ACCOUNTS, account_id)

    def require_account(self, account_id: int) -> BankAccount:
        """Get account by ID or raise NotFoundError."""
        account = self.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[BankAccount]:
        """List all accounts ordered by name."""
        return sorted(self.db.read_all(Collection.BANK_ACCOUNTS), key=lambda acc: acc.name)
