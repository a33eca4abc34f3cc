"""Balance and stock derivation.

Balances are never stored. They are folds over the live transaction rows,
seeded by the opening balances, so they depend only on the multiset of live
rows and never on insertion order.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.entities import (
    BankTransaction,
    CashTransaction,
    InitialBalance,
    InitialStockItem,
    OpeningBalance,
    PaymentMethod,
    StockKind,
    StockPosition,
    StockTransaction,
)

ZERO = Decimal("0")


def fold_cash(transactions: Iterable[CashTransaction], opening: Decimal = ZERO) -> Decimal:
    """Opening cash plus income minus expenses."""
    balance = Decimal(opening)
    for txn in transactions:
        balance += txn.signed_amount
    return balance


def fold_bank(
    transactions: Iterable[BankTransaction], bank_account_id: int, opening: Decimal = ZERO
) -> Decimal:
    """Opening amount of one account plus its deposits minus its withdrawals."""
    balance = Decimal(opening)
    for txn in transactions:
        if txn.bank_account_id == bank_account_id:
            balance += txn.signed_amount
    return balance


def fold_stock_quantity(
    transactions: Iterable[StockTransaction],
    item_name: str,
    opening_items: Iterable[InitialStockItem] = (),
) -> Decimal:
    """Held weight of one item: opening stock plus purchases minus sales."""
    quantity = sum((item.weight for item in opening_items if item.item_name == item_name), ZERO)
    for txn in transactions:
        if txn.item_name == item_name:
            quantity += txn.signed_weight
    return quantity


def fold_stock_positions(
    transactions: Iterable[StockTransaction],
    opening_items: Iterable[InitialStockItem] = (),
) -> list[StockPosition]:
    """Quantity and weighted average cost of every item, sorted by name.

    The average cost of an item is the cost of everything ever bought
    (opening stock included) divided by the weight bought. Sales reduce the
    quantity but not the average, which keeps the result independent of the
    order the rows are folded in.
    """
    quantity: dict[str, Decimal] = defaultdict(lambda: ZERO)
    bought_weight: dict[str, Decimal] = defaultdict(lambda: ZERO)
    bought_cost: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for item in opening_items:
        quantity[item.item_name] += item.weight
        bought_weight[item.item_name] += item.weight
        bought_cost[item.item_name] += item.weight * item.price_per_kg

    for txn in transactions:
        quantity[txn.item_name] += txn.signed_weight
        if txn.kind == StockKind.PURCHASE:
            bought_weight[txn.item_name] += txn.weight
            bought_cost[txn.item_name] += txn.weight * txn.price_per_kg

    positions = []
    for name in sorted(quantity):
        average = bought_cost[name] / bought_weight[name] if bought_weight[name] > 0 else ZERO
        positions.append(StockPosition(item_name=name, quantity=quantity[name], average_cost=average))
    return positions


def build_initial_balance(rows: Iterable[OpeningBalance]) -> InitialBalance:
    """Assemble the opening balance aggregate from its persisted lines."""
    cash = ZERO
    bank: dict[int, Decimal] = {}
    set_at = None
    for row in rows:
        if row.pool == PaymentMethod.CASH:
            cash += row.amount
        else:
            bank[row.bank_account_id] = bank.get(row.bank_account_id, ZERO) + row.amount
        if row.set_at is not None and (set_at is None or row.set_at < set_at):
            set_at = row.set_at
    return InitialBalance(cash=cash, bank=bank, set_at=set_at)


class BalanceService:
    """Read-only service deriving balances from the record store.

    Each computation reads inside one ``atomic()`` region so it never sees
    half of a multi-row write such as a transfer.
    """

    def __init__(self, db: RecordStore):
        """Initialize balance service.

        Args:
            db: Record store instance
        """
        self.db = db

    def get_initial_balance(self) -> InitialBalance:
        return build_initial_balance(self.db.read_all(Collection.INITIAL_BALANCES))

    def compute_cash_balance(self) -> Decimal:
        """Current cash balance."""
        with self.db.atomic():
            opening = self.get_initial_balance().cash
            return fold_cash(self.db.read_live(Collection.CASH_TRANSACTIONS), opening)

    def compute_bank_balance(self, bank_account_id: int) -> Decimal:
        """Current balance of one bank account."""
        with self.db.atomic():
            opening = self.get_initial_balance().bank_for(bank_account_id)
            rows = self.db.read_live(
                Collection.BANK_TRANSACTIONS, {"bank_account_id": bank_account_id}
            )
            return fold_bank(rows, bank_account_id, opening)

    def compute_bank_balances(self) -> dict[int, Decimal]:
        """Current balance of every bank account, keyed by account ID."""
        with self.db.atomic():
            initial = self.get_initial_balance()
            rows = self.db.read_live(Collection.BANK_TRANSACTIONS)
            account_ids = {acc.id for acc in self.db.read_all(Collection.BANK_ACCOUNTS)}
            account_ids |= set(initial.bank)
            return {
                account_id: fold_bank(rows, account_id, initial.bank_for(account_id))
                for account_id in sorted(account_ids)
            }

    def compute_total_bank_balance(self) -> Decimal:
        return sum(self.compute_bank_balances().values(), ZERO)

    def compute_stock_quantity(self, item_name: str) -> Decimal:
        """Currently held weight of an item (case-sensitive name)."""
        with self.db.atomic():
            rows = self.db.read_live(Collection.STOCK_TRANSACTIONS, {"item_name": item_name})
            opening = self.db.read_live(Collection.INITIAL_STOCK, {"item_name": item_name})
            return fold_stock_quantity(rows, item_name, opening)

    def list_stock_positions(self) -> list[StockPosition]:
        with self.db.atomic():
            rows = self.db.read_live(Collection.STOCK_TRANSACTIONS)
            opening = self.db.read_live(Collection.INITIAL_STOCK)
            return fold_stock_positions(rows, opening)

    def compute_stock_valuation(self) -> Decimal:
        """Value of all held stock at weighted average cost."""
        return sum((position.value for position in self.list_stock_positions()), Decimal("0.00"))
