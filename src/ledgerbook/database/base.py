"""Abstract record store interface."""

import threading
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import replace
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerbook.domain.entities import (
    ActivityLogEntry,
    BankAccount,
    BankTransaction,
    CashTransaction,
    Category,
    InitialStockItem,
    OpeningBalance,
    StockTransaction,
    Vendor,
)

Record = TypeVar("Record")


class Collection(str, Enum):
    """Named collections held by a record store."""

    BANK_ACCOUNTS = "bank_accounts"
    CATEGORIES = "categories"
    VENDORS = "vendors"
    INITIAL_BALANCES = "initial_balances"
    INITIAL_STOCK = "initial_stock"
    STOCK_TRANSACTIONS = "stock_transactions"
    CASH_TRANSACTIONS = "cash_transactions"
    BANK_TRANSACTIONS = "bank_transactions"
    ACTIVITY_LOG = "activity_log"


RECORD_TYPES: dict[Collection, type] = {
    Collection.BANK_ACCOUNTS: BankAccount,
    Collection.CATEGORIES: Category,
    Collection.VENDORS: Vendor,
    Collection.INITIAL_BALANCES: OpeningBalance,
    Collection.INITIAL_STOCK: InitialStockItem,
    Collection.STOCK_TRANSACTIONS: StockTransaction,
    Collection.CASH_TRANSACTIONS: CashTransaction,
    Collection.BANK_TRANSACTIONS: BankTransaction,
    Collection.ACTIVITY_LOG: ActivityLogEntry,
}

SOFT_DELETABLE = frozenset(
    {
        Collection.STOCK_TRANSACTIONS,
        Collection.CASH_TRANSACTIONS,
        Collection.BANK_TRANSACTIONS,
    }
)


_STAMP_FIELDS = ("created_at", "set_at", "timestamp")


def ensure_soft_deletable(collection: Collection) -> None:
    """Raise if rows of a collection cannot be soft deleted."""
    if collection not in SOFT_DELETABLE:
        raise ValueError(f"Collection '{collection.value}' does not support soft delete")


def stamp_new_record(record: Record) -> Record:
    """Fill the creation timestamp of a record that does not carry one yet."""
    for name in _STAMP_FIELDS:
        if hasattr(record, name) and getattr(record, name) is None:
            return replace(record, **{name: datetime.now(UTC)})
    return record


class RecordStore(ABC):
    """Abstract keyed-record store for ledgerbook.

    Records are the frozen dataclasses from ``ledgerbook.domain.entities``;
    each collection holds exactly one record type (see ``RECORD_TYPES``).
    Every public method runs under a per-store re-entrant lock, and
    ``atomic()`` holds that lock for the whole of a multi-write region.
    """

    supports_transactions: bool = False

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group several writes into one unit.

        Stores with ``supports_transactions`` roll back every write made in
        the region if it exits with an exception. Other stores only
        serialize the region against concurrent callers.
        """
        pass

    @abstractmethod
    def create(self, collection: Collection, record: Record) -> Record:
        """Insert a record and return it with its assigned id."""
        pass

    @abstractmethod
    def get(self, collection: Collection, record_id: int) -> Optional[Record]:
        """Get a record by id, live or soft-deleted."""
        pass

    @abstractmethod
    def read_live(
        self, collection: Collection, filters: Optional[Mapping[str, Any]] = None
    ) -> list[Record]:
        """List live records, optionally filtered by field equality.

        For soft-deletable collections only rows without ``deleted_at`` are
        returned. Other collections return every row.
        """
        pass

    @abstractmethod
    def read_all(self, collection: Collection) -> list[Record]:
        """List every record in a collection, including soft-deleted ones."""
        pass

    @abstractmethod
    def update(self, collection: Collection, record_id: int, **changes: Any) -> Record:
        """Update fields of a record and return the new version."""
        pass

    @abstractmethod
    def soft_delete(self, collection: Collection, record_id: int, deleted_at: datetime) -> None:
        """Mark a record as deleted."""
        pass

    @abstractmethod
    def restore(self, collection: Collection, record_id: int) -> None:
        """Clear the deletion mark of a record."""
        pass

    @abstractmethod
    def clear(self, collection: Collection) -> None:
        """Physically remove every record of a collection."""
        pass

    @abstractmethod
    def bulk_insert(self, collection: Collection, records: list[Record]) -> None:
        """Insert records keeping their ids."""
        pass
