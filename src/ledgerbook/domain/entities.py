"""Domain model entities for ledgerbook.

These are pure data classes representing business concepts, independent of
database schema. The storage layer converts its rows into these types, so the
ledger logic never handles untyped records.
"""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional

CENTS = Decimal("0.01")
GRAMS = Decimal("0.001")


class CashDirection(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BankDirection(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class StockKind(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"


class PaymentMethod(str, Enum):
    """Money pool a stock transaction or opening balance belongs to."""

    CASH = "cash"
    BANK = "bank"


class TransferDirection(str, Enum):
    CASH_TO_BANK = "cash_to_bank"
    BANK_TO_CASH = "bank_to_cash"


class TransactionKind(str, Enum):
    CASH = "cash"
    BANK = "bank"
    STOCK = "stock"


class CategoryType(str, Enum):
    CASH = "cash"
    BANK = "bank"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


def money(value: Decimal) -> Decimal:
    """Round a monetary value to cents."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def kilograms(value: Decimal) -> Decimal:
    """Round a weight to grams."""
    return value.quantize(GRAMS, rounding=ROUND_HALF_UP)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return a timezone-aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class Actor:
    """Identity stamped on activity log entries."""

    id: str
    label: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: Optional[int]
    name: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    """Transaction category, scoped to the cash or the bank ledger."""

    id: Optional[int]
    name: str
    type: CategoryType
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Vendor:
    """Vendor domain entity."""

    id: Optional[int]
    name: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashTransaction:
    """Cash ledger row."""

    id: Optional[int]
    date: date
    amount: Decimal
    direction: CashDirection
    category: str
    description: str
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    linked_stock_id: Optional[int] = None
    transfer_ref: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None

    @property
    def signed_amount(self) -> Decimal:
        if self.direction == CashDirection.INCOME:
            return self.amount
        return -self.amount


@dataclass(frozen=True)
class BankTransaction:
    """Bank ledger row, always tied to one bank account."""

    id: Optional[int]
    date: date
    amount: Decimal
    direction: BankDirection
    bank_account_id: int
    category: str
    description: str
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    linked_stock_id: Optional[int] = None
    transfer_ref: Optional[str] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None

    @property
    def signed_amount(self) -> Decimal:
        if self.direction == BankDirection.DEPOSIT:
            return self.amount
        return -self.amount


@dataclass(frozen=True)
class StockTransaction:
    """Stock purchase or sale of a named item, paid by cash or bank."""

    id: Optional[int]
    date: date
    item_name: str
    weight: Decimal
    price_per_kg: Decimal
    kind: StockKind
    payment_method: PaymentMethod
    bank_account_id: Optional[int] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None

    @property
    def total(self) -> Decimal:
        return money(self.weight * self.price_per_kg)

    @property
    def signed_weight(self) -> Decimal:
        if self.kind == StockKind.PURCHASE:
            return self.weight
        return -self.weight


@dataclass(frozen=True)
class OpeningBalance:
    """One persisted line of the initial balance: the cash pool or one bank account."""

    id: Optional[int]
    pool: PaymentMethod
    amount: Decimal
    bank_account_id: Optional[int] = None
    set_at: Optional[datetime] = None


@dataclass(frozen=True)
class InitialBalance:
    """Opening cash plus opening amount per bank account."""

    cash: Decimal = Decimal("0")
    bank: dict[int, Decimal] = field(default_factory=dict)
    set_at: Optional[datetime] = None

    def bank_for(self, bank_account_id: int) -> Decimal:
        return self.bank.get(bank_account_id, Decimal("0"))


@dataclass(frozen=True)
class InitialStockItem:
    """Opening stock for an item, held before the first recorded transaction."""

    id: Optional[int]
    item_name: str
    weight: Decimal
    price_per_kg: Decimal
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ActivityLogEntry:
    """Append-only audit entry."""

    id: Optional[int]
    timestamp: datetime
    actor_id: str
    actor_label: str
    description: str


@dataclass(frozen=True)
class StockPosition:
    """Derived holding of one item."""

    item_name: str
    quantity: Decimal
    average_cost: Decimal

    @property
    def value(self) -> Decimal:
        if self.quantity <= 0:
            return Decimal("0.00")
        return money(self.quantity * self.average_cost)


@dataclass(frozen=True)
class ImportReport:
    """Outcome of a successful snapshot import."""

    replaced: tuple[str, ...]
    record_counts: dict[str, int] = field(default_factory=dict)

    @property
    def total_records(self) -> int:
        return sum(self.record_counts.values())
