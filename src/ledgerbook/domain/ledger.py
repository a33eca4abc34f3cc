"""Transaction ledger domain service."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Mapping, Optional

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.category import (
    CategoryService,
    STOCK_PURCHASE_CATEGORY,
    STOCK_SALE_CATEGORY,
    SYSTEM_CATEGORIES,
)
from ledgerbook.domain.entities import (
    BankDirection,
    BankTransaction,
    CashDirection,
    CashTransaction,
    CategoryType,
    InitialBalance,
    InitialStockItem,
    OpeningBalance,
    PaymentMethod,
    StockKind,
    StockTransaction,
    TransactionKind,
    kilograms,
    money,
)
from ledgerbook.domain.errors import (
    AlreadyInitializedError,
    DanglingReferenceError,
    InsufficientStockError,
    NotFoundError,
    NotInitializedError,
    ValidationError,
    account_not_found,
    not_initialized,
    transaction_not_found,
)
from ledgerbook.domain.identity import IdentityProvider, require_admin
from ledgerbook.domain.validation import (
    require_choice,
    require_non_negative,
    require_positive,
    validate_bank_transaction,
    validate_cash_transaction,
    validate_initial_stock_item,
    validate_stock_transaction,
)

logger = logging.getLogger(__name__)

TRANSACTION_COLLECTIONS = {
    TransactionKind.CASH: Collection.CASH_TRANSACTIONS,
    TransactionKind.BANK: Collection.BANK_TRANSACTIONS,
    TransactionKind.STOCK: Collection.STOCK_TRANSACTIONS,
}


def _matching(rows: list, **filters: Any) -> list:
    return [row for row in rows if all(getattr(row, key) == value for key, value in filters.items())]


class LedgerService:
    """Service owning cash, bank and stock transactions.

    Balances are not stored anywhere; see BalanceService.
    """

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        """Initialize ledger service.

        Args:
            db: Record store instance
            identity: Provider of the acting user
        """
        self.db = db
        self.identity = identity
        self.activity = ActivityLogService(db)
        self.balances = BalanceService(db)
        self.categories = CategoryService(db, identity)

    # Initialization

    def is_initialized(self) -> bool:
        """Return True once the opening balances have been set."""
        return bool(self.db.read_all(Collection.INITIAL_BALANCES))

    def get_initial_balance(self) -> Optional[InitialBalance]:
        """Get the opening balances, or None before initialization."""
        if not self.is_initialized():
            return None
        return self.balances.get_initial_balance()

    def ensure_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError(not_initialized())

    def ensure_bank_account(self, bank_account_id: Any) -> int:
        if not isinstance(bank_account_id, int) or isinstance(bank_account_id, bool):
            raise ValidationError("bank_account_id must be an account ID", field="bank_account_id")
        if self.db.get(Collection.BANK_ACCOUNTS, bank_account_id) is None:
            raise DanglingReferenceError(account_not_found(bank_account_id))
        return bank_account_id

    def set_initial_balance(
        self, cash: Decimal, bank: Optional[Mapping[int, Decimal]] = None
    ) -> InitialBalance:
        """Set the opening cash and per-account bank balances, exactly once.

        Args:
            cash: Opening cash amount
            bank: Opening amount per bank account ID

        Returns:
            The stored initial balance

        Raises:
            PermissionDeniedError: If the actor is not an admin
            ValidationError: If an amount is negative
            DanglingReferenceError: If a bank account does not exist
            AlreadyInitializedError: If the balances were already set
        """
        actor = require_admin(self.identity, "set initial balances")
        cash_amount = money(require_non_negative(cash, "cash"))
        bank_amounts = {
            account_id: money(require_non_negative(amount, f"bank[{account_id}]"))
            for account_id, amount in (bank or {}).items()
        }

        with self.db.atomic():
            if self.is_initialized():
                raise AlreadyInitializedError("Initial balances have already been set")
            for account_id in bank_amounts:
                self.ensure_bank_account(account_id)

            set_at = datetime.now(UTC)
            self.db.create(
                Collection.INITIAL_BALANCES,
                OpeningBalance(id=None, pool=PaymentMethod.CASH, amount=cash_amount, set_at=set_at),
            )
            for account_id, amount in sorted(bank_amounts.items()):
                self.db.create(
                    Collection.INITIAL_BALANCES,
                    OpeningBalance(
                        id=None,
                        pool=PaymentMethod.BANK,
                        amount=amount,
                        bank_account_id=account_id,
                        set_at=set_at,
                    ),
                )

        logger.info("Initial balances set: cash=%s bank=%s", cash_amount, bank_amounts)
        self.activity.record(actor, "Set initial cash and bank balances.")
        return self.balances.get_initial_balance()

    def add_initial_stock_item(
        self, item_name: str, weight: Decimal, price_per_kg: Decimal
    ) -> InitialStockItem:
        """Record opening stock held before the first stock transaction."""
        actor = self.identity.current_actor()
        item = InitialStockItem(
            id=None,
            item_name=item_name,
            weight=kilograms(require_positive(weight, "weight")),
            price_per_kg=money(require_positive(price_per_kg, "price_per_kg")),
        )
        validate_initial_stock_item(item)
        saved = self.db.create(Collection.INITIAL_STOCK, item)
        self.activity.record(actor, f"Added initial stock: {item_name} ({item.weight}kg)")
        return saved

    # Recording

    def _require_user_category(self, category: str, category_type: CategoryType) -> None:
        if category in SYSTEM_CATEGORIES:
            raise ValidationError(
                f"Category '{category}' is reserved for ledger-generated entries", field="category"
            )
        if not self.categories.is_recognized(category, category_type):
            raise ValidationError(
                f"Unknown {category_type.value} category '{category}'", field="category"
            )

    def record_cash(
        self,
        date: date,
        amount: Decimal,
        direction: CashDirection | str,
        category: str,
        description: str = "",
    ) -> CashTransaction:
        """Record a cash income or expense.

        Raises:
            ValidationError: If a field is invalid or the category is unknown
            NotInitializedError: If the opening balances are not set
        """
        actor = self.identity.current_actor()
        txn = CashTransaction(
            id=None,
            date=date,
            amount=money(require_positive(amount, "amount")),
            direction=require_choice(CashDirection, direction, "direction"),
            category=category,
            description=description or "",
        )
        validate_cash_transaction(txn)

        with self.db.atomic():
            self.ensure_initialized()
            self._require_user_category(category, CategoryType.CASH)
            saved = self.db.create(Collection.CASH_TRANSACTIONS, txn)

        self.activity.record(actor, f"Added cash transaction: {txn.description or txn.category}")
        self.warn_if_negative_cash()
        return saved

    def record_bank(
        self,
        date: date,
        amount: Decimal,
        direction: BankDirection | str,
        bank_account_id: int,
        category: str,
        description: str = "",
    ) -> BankTransaction:
        """Record a bank deposit or withdrawal on one account.

        Raises:
            ValidationError: If a field is invalid or the category is unknown
            DanglingReferenceError: If the bank account does not exist
            NotInitializedError: If the opening balances are not set
        """
        actor = self.identity.current_actor()
        txn = BankTransaction(
            id=None,
            date=date,
            amount=money(require_positive(amount, "amount")),
            direction=require_choice(BankDirection, direction, "direction"),
            bank_account_id=bank_account_id,
            category=category,
            description=description or "",
        )
        validate_bank_transaction(txn)

        with self.db.atomic():
            self.ensure_initialized()
            self.ensure_bank_account(bank_account_id)
            self._require_user_category(category, CategoryType.BANK)
            saved = self.db.create(Collection.BANK_TRANSACTIONS, txn)

        self.activity.record(actor, f"Added bank transaction: {txn.description or txn.category}")
        self.warn_if_negative_bank(bank_account_id)
        return saved

    def record_stock(
        self,
        date: date,
        item_name: str,
        weight: Decimal,
        price_per_kg: Decimal,
        kind: StockKind | str,
        payment_method: PaymentMethod | str,
        bank_account_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> StockTransaction:
        """Record a stock purchase or sale together with its money movement.

        A purchase pays weight x price out of cash or the bank account, a
        sale pays it in. The money side is written as a linked cash or bank
        row in the same atomic unit as the stock row.

        Raises:
            ValidationError: If a field is invalid
            DanglingReferenceError: If the bank account does not exist
            InsufficientStockError: If a sale exceeds the held quantity
            NotInitializedError: If the opening balances are not set
        """
        actor = self.identity.current_actor()
        txn = StockTransaction(
            id=None,
            date=date,
            item_name=item_name,
            weight=kilograms(require_positive(weight, "weight")),
            price_per_kg=money(require_positive(price_per_kg, "price_per_kg")),
            kind=require_choice(StockKind, kind, "kind"),
            payment_method=require_choice(PaymentMethod, payment_method, "payment_method"),
            bank_account_id=bank_account_id,
            description=description,
        )
        validate_stock_transaction(txn)
        if txn.total <= 0:
            raise ValidationError("weight x price_per_kg rounds to zero", field="weight")

        with self.db.atomic():
            self.ensure_initialized()
            if txn.payment_method == PaymentMethod.BANK:
                self.ensure_bank_account(bank_account_id)
            if txn.kind == StockKind.SALE:
                self._ensure_stock_available(txn.item_name, txn.weight)

            saved = self.db.create(Collection.STOCK_TRANSACTIONS, txn)
            try:
                self._create_money_row(saved)
            except Exception:
                if not self.db.supports_transactions:
                    self.compensate(Collection.STOCK_TRANSACTIONS, saved.id)
                raise

        self.activity.record(actor, f"Added stock transaction: {txn.item_name}")
        if txn.payment_method == PaymentMethod.CASH:
            self.warn_if_negative_cash()
        else:
            self.warn_if_negative_bank(txn.bank_account_id)
        return saved

    def _create_money_row(self, stock: StockTransaction) -> None:
        purchase = stock.kind == StockKind.PURCHASE
        category = STOCK_PURCHASE_CATEGORY if purchase else STOCK_SALE_CATEGORY
        description = stock.description or f"{stock.kind.value} of {stock.weight}kg of {stock.item_name}"
        if stock.payment_method == PaymentMethod.CASH:
            self.db.create(
                Collection.CASH_TRANSACTIONS,
                CashTransaction(
                    id=None,
                    date=stock.date,
                    amount=stock.total,
                    direction=CashDirection.EXPENSE if purchase else CashDirection.INCOME,
                    category=category,
                    description=description,
                    linked_stock_id=stock.id,
                ),
            )
        else:
            self.db.create(
                Collection.BANK_TRANSACTIONS,
                BankTransaction(
                    id=None,
                    date=stock.date,
                    amount=stock.total,
                    direction=BankDirection.WITHDRAWAL if purchase else BankDirection.DEPOSIT,
                    bank_account_id=stock.bank_account_id,
                    category=category,
                    description=description,
                    linked_stock_id=stock.id,
                ),
            )

    def _ensure_stock_available(self, item_name: str, weight: Decimal) -> None:
        available = self.balances.compute_stock_quantity(item_name)
        if available < weight:
            raise InsufficientStockError(item_name, weight, available)

    def compensate(self, collection: Collection, record_id: int) -> Optional[Exception]:
        """Soft-delete a row written earlier in a unit that failed.

        Returns:
            The exception raised while compensating, or None on success
        """
        try:
            self.db.soft_delete(collection, record_id, datetime.now(UTC))
            logger.warning("Compensated %s %s after a failed write", collection.value, record_id)
            return None
        except Exception as exc:
            logger.exception("Could not compensate %s %s", collection.value, record_id)
            return exc

    def warn_if_negative_cash(self) -> None:
        balance = self.balances.compute_cash_balance()
        if balance < 0:
            logger.warning("Cash balance is negative: %s", balance)

    def warn_if_negative_bank(self, bank_account_id: int) -> None:
        balance = self.balances.compute_bank_balance(bank_account_id)
        if balance < 0:
            logger.warning("Bank account %s balance is negative: %s", bank_account_id, balance)

    def warn_if_negative_stock(self, item_name: str) -> None:
        quantity = self.balances.compute_stock_quantity(item_name)
        if quantity < 0:
            logger.warning("Stock of %s is negative: %skg", item_name, quantity)

    # Reading

    def get_transaction(self, kind: TransactionKind | str, transaction_id: int):
        """Get a transaction of any kind by ID, live or deleted."""
        kind = require_choice(TransactionKind, kind, "kind")
        return self.db.get(TRANSACTION_COLLECTIONS[kind], transaction_id)

    def list_transactions(self, kind: TransactionKind | str, include_deleted: bool = False) -> list:
        """List transactions of one kind ordered by date, then ID."""
        kind = require_choice(TransactionKind, kind, "kind")
        collection = TRANSACTION_COLLECTIONS[kind]
        rows = self.db.read_all(collection) if include_deleted else self.db.read_live(collection)
        return sorted(rows, key=lambda row: (row.date, row.id))

    def list_deleted(self, kind: Optional[TransactionKind | str] = None) -> list[tuple[TransactionKind, Any]]:
        """List soft-deleted transactions, most recently deleted first.

        Returns:
            List of (kind, transaction) pairs
        """
        kinds = [require_choice(TransactionKind, kind, "kind")] if kind is not None else list(TransactionKind)
        deleted = []
        for each in kinds:
            for row in self.db.read_all(TRANSACTION_COLLECTIONS[each]):
                if row.deleted_at is not None:
                    deleted.append((each, row))
        return sorted(deleted, key=lambda pair: pair[1].deleted_at, reverse=True)

    # Soft delete and restore

    def _load(self, kind: TransactionKind, transaction_id: int):
        record = self.db.get(TRANSACTION_COLLECTIONS[kind], transaction_id)
        if record is None:
            raise NotFoundError(transaction_not_found(kind.value, transaction_id))
        if kind != TransactionKind.STOCK and record.linked_stock_id is not None:
            raise ValidationError(
                f"{kind.value.capitalize()} transaction {transaction_id} belongs to stock "
                f"transaction {record.linked_stock_id}; delete or restore that instead",
                field="id",
            )
        return record

    def _linked_rows(self, kind: TransactionKind, record) -> list[tuple[Collection, Any]]:
        """Return the record with every row that is deleted and restored with it."""
        rows = [(TRANSACTION_COLLECTIONS[kind], record)]
        if kind == TransactionKind.STOCK:
            for collection in (Collection.CASH_TRANSACTIONS, Collection.BANK_TRANSACTIONS):
                for row in _matching(self.db.read_all(collection), linked_stock_id=record.id):
                    rows.append((collection, row))
        elif record.transfer_ref is not None:
            for collection in (Collection.CASH_TRANSACTIONS, Collection.BANK_TRANSACTIONS):
                for row in _matching(self.db.read_all(collection), transfer_ref=record.transfer_ref):
                    if (collection, row.id) != (TRANSACTION_COLLECTIONS[kind], record.id):
                        rows.append((collection, row))
        return rows

    def soft_delete(self, kind: TransactionKind | str, transaction_id: int) -> bool:
        """Soft-delete a transaction and the rows linked to it.

        Deleting an already deleted transaction is a successful no-op.

        Returns:
            True if anything changed

        Raises:
            PermissionDeniedError: If the actor is not an admin
            NotFoundError: If the transaction does not exist
            ValidationError: If the row is the money side of a stock transaction
        """
        actor = require_admin(self.identity, "delete data")
        kind = require_choice(TransactionKind, kind, "kind")

        with self.db.atomic():
            record = self._load(kind, transaction_id)
            if record.deleted_at is not None:
                return False
            deleted_at = datetime.now(UTC)
            for collection, row in self._linked_rows(kind, record):
                if row.deleted_at is None:
                    self.db.soft_delete(collection, row.id, deleted_at)

        self.activity.record(actor, f"Deleted item from {TRANSACTION_COLLECTIONS[kind].value} with ID: {transaction_id}")
        if kind == TransactionKind.STOCK and record.kind == StockKind.PURCHASE:
            self.warn_if_negative_stock(record.item_name)
        return True

    def restore(self, kind: TransactionKind | str, transaction_id: int) -> bool:
        """Restore a soft-deleted transaction and the rows linked to it.

        Restoring a live transaction is a successful no-op.

        Returns:
            True if anything changed

        Raises:
            PermissionDeniedError: If the actor is not an admin
            NotFoundError: If the transaction does not exist
            ValidationError: If the row is the money side of a stock transaction
            InsufficientStockError: If restoring a sale would oversell the item
        """
        actor = require_admin(self.identity, "restore data")
        kind = require_choice(TransactionKind, kind, "kind")

        with self.db.atomic():
            record = self._load(kind, transaction_id)
            if record.deleted_at is None:
                return False
            if kind == TransactionKind.STOCK and record.kind == StockKind.SALE:
                self._ensure_stock_available(record.item_name, record.weight)
            for collection, row in self._linked_rows(kind, record):
                if row.deleted_at is not None:
                    self.db.restore(collection, row.id)

        self.activity.record(actor, f"Restored item from {TRANSACTION_COLLECTIONS[kind].value} with ID: {transaction_id}")
        return True
