"""Fund transfers between the cash pool and a bank account."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.category import TRANSFER_CATEGORY
from ledgerbook.domain.entities import (
    BankDirection,
    BankTransaction,
    CashDirection,
    CashTransaction,
    TransferDirection,
    money,
)
from ledgerbook.domain.errors import TransferFailure, ValidationError
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.domain.identity import IdentityProvider
from ledgerbook.domain.validation import require_choice, require_date, require_positive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transfer:
    """The two ledger rows written by one transfer."""

    transfer_ref: str
    direction: TransferDirection
    cash_transaction: CashTransaction
    bank_transaction: BankTransaction

    @property
    def amount(self) -> Decimal:
        return self.cash_transaction.amount


class TransferService:
    """Moves money between cash and a bank account as a linked pair of rows."""

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        """Initialize transfer service.

        Args:
            db: Record store instance
            identity: Provider of the acting user
        """
        self.db = db
        self.identity = identity
        self.ledger = LedgerService(db, identity)
        self.activity = ActivityLogService(db)

    def transfer(
        self,
        direction: TransferDirection | str,
        amount: Decimal,
        date: date,
        bank_account_id: int,
        description: Optional[str] = None,
    ) -> Transfer:
        """Transfer money between cash and a bank account.

        Writes a cash row and a bank row with the same amount, opposite
        economic direction, the "Funds Transfer" category and a shared
        transfer reference. Either both rows exist afterwards or neither is
        live.

        Raises:
            ValidationError: If the amount, date or direction is invalid
            DanglingReferenceError: If the bank account does not exist
            NotInitializedError: If the opening balances are not set
            TransferFailure: If writing the pair failed
        """
        actor = self.identity.current_actor()
        direction = require_choice(TransferDirection, direction, "direction")
        amount = money(require_positive(amount, "amount"))
        if amount <= 0:
            raise ValidationError("amount rounds to zero", field="amount")
        require_date(date)

        from_cash = direction == TransferDirection.CASH_TO_BANK
        detail = description or "Funds Transfer"
        from_desc = f"Transfer to {'Bank' if from_cash else 'Cash'}: {detail}"
        to_desc = f"Transfer from {'Cash' if from_cash else 'Bank'}: {detail}"
        transfer_ref = uuid.uuid4().hex

        cash_row = CashTransaction(
            id=None,
            date=date,
            amount=amount,
            direction=CashDirection.EXPENSE if from_cash else CashDirection.INCOME,
            category=TRANSFER_CATEGORY,
            description=from_desc if from_cash else to_desc,
            transfer_ref=transfer_ref,
        )
        bank_row = BankTransaction(
            id=None,
            date=date,
            amount=amount,
            direction=BankDirection.DEPOSIT if from_cash else BankDirection.WITHDRAWAL,
            bank_account_id=bank_account_id,
            category=TRANSFER_CATEGORY,
            description=to_desc if from_cash else from_desc,
            transfer_ref=transfer_ref,
        )
        # The side money leaves is written first
        if from_cash:
            first, second = (Collection.CASH_TRANSACTIONS, cash_row), (Collection.BANK_TRANSACTIONS, bank_row)
        else:
            first, second = (Collection.BANK_TRANSACTIONS, bank_row), (Collection.CASH_TRANSACTIONS, cash_row)

        try:
            with self.db.atomic():
                self.ledger.ensure_initialized()
                self.ledger.ensure_bank_account(bank_account_id)
                saved_first = self.db.create(*first)
                try:
                    saved_second = self.db.create(*second)
                except Exception as exc:
                    message = f"Transfer failed while writing {second[0].value}: {exc}"
                    # Transactional stores undo the first leg when atomic() rolls back
                    if not self.db.supports_transactions:
                        problem = self.ledger.compensate(first[0], saved_first.id)
                        if problem is not None:
                            message += f" (compensation failed: {problem})"
                    raise TransferFailure(message) from exc
        except TransferFailure:
            logger.error("Transfer %s rolled back", transfer_ref)
            raise

        if from_cash:
            saved_cash, saved_bank = saved_first, saved_second
        else:
            saved_bank, saved_cash = saved_first, saved_second

        logger.info("Transferred %s %s (ref %s)", amount, direction.value, transfer_ref)
        self.activity.record(actor, f"Transferred {amount} from {'cash' if from_cash else 'bank'}")
        if from_cash:
            self.ledger.warn_if_negative_cash()
        else:
            self.ledger.warn_if_negative_bank(bank_account_id)

        return Transfer(
            transfer_ref=transfer_ref,
            direction=direction,
            cash_transaction=saved_cash,
            bank_transaction=saved_bank,
        )

    def find_transfer(self, transfer_ref: str) -> Optional[Transfer]:
        """Rebuild a transfer from its two rows, live or deleted."""
        cash_rows = [
            row for row in self.db.read_all(Collection.CASH_TRANSACTIONS) if row.transfer_ref == transfer_ref
        ]
        bank_rows = [
            row for row in self.db.read_all(Collection.BANK_TRANSACTIONS) if row.transfer_ref == transfer_ref
        ]
        if len(cash_rows) != 1 or len(bank_rows) != 1:
            return None
        cash_row, bank_row = cash_rows[0], bank_rows[0]
        direction = (
            TransferDirection.CASH_TO_BANK
            if cash_row.direction == CashDirection.EXPENSE
            else TransferDirection.BANK_TO_CASH
        )
        return Transfer(
            transfer_ref=transfer_ref,
            direction=direction,
            cash_transaction=cash_row,
            bank_transaction=bank_row,
        )
