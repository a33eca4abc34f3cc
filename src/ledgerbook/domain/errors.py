"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Iterable, Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class PermissionDeniedError(DomainError):
    """The current actor is not allowed to perform the operation."""


class NotInitializedError(DomainError):
    """A ledger mutation was attempted before the initial balance was set."""


class AlreadyInitializedError(DomainError):
    """The initial balance has already been set."""


class DanglingReferenceError(DomainError):
    """A record points at a bank account or stock row that does not exist."""


class InsufficientStockError(DomainError):
    """A sale asks for more weight than is currently held."""

    def __init__(self, item_name: str, requested: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient stock for '{item_name}': requested {requested}kg, "
            f"available {available}kg"
        )
        self.item_name = item_name
        self.requested = requested
        self.available = available


class TransferFailure(DomainError):
    """A transfer could not be completed; no half of it remains live."""


class ImportValidationError(DomainError):
    """A snapshot was rejected before any data was touched."""

    def __init__(self, problems: Iterable[str]):
        self.problems = list(problems)
        shown = "; ".join(self.problems[:5])
        more = len(self.problems) - 5
        if more > 0:
            shown += f" (and {more} more)"
        super().__init__(f"Invalid snapshot: {shown}")


class ImportFailure(DomainError):
    """Import failed while writing data."""

    def __init__(
        self,
        message: str,
        replaced: Iterable[str] = (),
        failed_collection: Optional[str] = None,
    ):
        super().__init__(message)
        self.replaced = tuple(replaced)
        self.failed_collection = failed_collection


class StoreUnavailable(DomainError):
    """The underlying record store could not be reached."""


def account_not_found(account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {account_id} not found"


def transaction_not_found(kind: str, transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"{kind.capitalize()} transaction {transaction_id} not found"


def admin_required(action: str) -> str:
    """Return message for an operation reserved to admins."""
    return f"Only admins can {action}."


def not_initialized() -> str:
    """Return message for a mutation before the opening balances exist."""
    return "Initial balances have not been set. Run 'ledgerbook init' first."
