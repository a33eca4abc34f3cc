"""Tests for TransferService."""

import threading
from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.database.base import Collection
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.category import TRANSFER_CATEGORY
from ledgerbook.domain.entities import (
    BankDirection,
    BankTransaction,
    CashDirection,
    CashTransaction,
    TransferDirection,
)
from ledgerbook.domain.errors import (
    DanglingReferenceError,
    NotInitializedError,
    StoreUnavailable,
    TransferFailure,
    ValidationError,
)
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.domain.transfer import TransferService

D = date(2024, 3, 15)


def test_cash_to_bank_writes_matched_pair(bank_account_id, transfer_service, temp_db):
    result = transfer_service.transfer(TransferDirection.CASH_TO_BANK, Decimal("100"), D, bank_account_id, "float")

    cash = temp_db.get(Collection.CASH_TRANSACTIONS, result.cash_transaction.id)
    bank = temp_db.get(Collection.BANK_TRANSACTIONS, result.bank_transaction.id)
    assert cash.amount == bank.amount == Decimal("100")
    assert cash.direction == CashDirection.EXPENSE
    assert bank.direction == BankDirection.DEPOSIT
    assert cash.category == bank.category == TRANSFER_CATEGORY
    assert cash.date == bank.date == D
    assert cash.transfer_ref == bank.transfer_ref == result.transfer_ref
    assert cash.description == "Transfer to Bank: float"
    assert bank.description == "Transfer from Cash: float"


def test_bank_to_cash(bank_account_id, transfer_service, balance_service):
    transfer_service.transfer("bank_to_cash", Decimal("50"), D, bank_account_id)
    assert balance_service.compute_cash_balance() == Decimal("1050")
    assert balance_service.compute_bank_balance(bank_account_id) == Decimal("450")


def test_total_money_is_conserved(bank_account_id, transfer_service, balance_service):
    before = balance_service.compute_cash_balance() + balance_service.compute_total_bank_balance()
    transfer_service.transfer("cash_to_bank", Decimal("333.33"), D, bank_account_id)
    after = balance_service.compute_cash_balance() + balance_service.compute_total_bank_balance()
    assert before == after


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1"), Decimal("0.001")])
def test_invalid_amount(bank_account_id, transfer_service, temp_db, amount):
    with pytest.raises(ValidationError):
        transfer_service.transfer("cash_to_bank", amount, D, bank_account_id)
    assert temp_db.read_all(Collection.CASH_TRANSACTIONS) == []


def test_unknown_direction(bank_account_id, transfer_service):
    with pytest.raises(ValidationError) as exc_info:
        transfer_service.transfer("sideways", Decimal("1"), D, bank_account_id)
    assert exc_info.value.field == "direction"


def test_unknown_account(bank_account_id, transfer_service, temp_db):
    with pytest.raises(DanglingReferenceError):
        transfer_service.transfer("cash_to_bank", Decimal("1"), D, 999)
    assert temp_db.read_all(Collection.CASH_TRANSACTIONS) == []


def test_requires_initialization(temp_db, identity):
    with pytest.raises(NotInitializedError):
        TransferService(temp_db, identity).transfer("cash_to_bank", Decimal("1"), D, 1)


def test_failed_second_write_leaves_no_live_rows(any_db, identity, setup_ledger, monkeypatch):
    account_id = setup_ledger(any_db, identity)
    service = TransferService(any_db, identity)
    balances = BalanceService(any_db)
    cash_before = balances.compute_cash_balance()
    original = any_db.create

    def failing_create(collection, record):
        if collection == Collection.BANK_TRANSACTIONS:
            raise StoreUnavailable("connection lost")
        return original(collection, record)

    monkeypatch.setattr(any_db, "create", failing_create)
    with pytest.raises(TransferFailure):
        service.transfer("cash_to_bank", Decimal("100"), D, account_id)

    assert any_db.read_live(Collection.CASH_TRANSACTIONS) == []
    assert any_db.read_live(Collection.BANK_TRANSACTIONS) == []
    assert balances.compute_cash_balance() == cash_before


def test_deleting_one_leg_deletes_both(temp_db, identity, bank_account_id, transfer_service):
    result = transfer_service.transfer("cash_to_bank", Decimal("100"), D, bank_account_id)
    ledger = LedgerService(temp_db, identity)
    ledger.soft_delete("bank", result.bank_transaction.id)
    assert temp_db.read_live(Collection.CASH_TRANSACTIONS) == []
    assert temp_db.read_live(Collection.BANK_TRANSACTIONS) == []

    ledger.restore("cash", result.cash_transaction.id)
    assert len(temp_db.read_live(Collection.CASH_TRANSACTIONS)) == 1
    assert len(temp_db.read_live(Collection.BANK_TRANSACTIONS)) == 1


def test_find_transfer(bank_account_id, transfer_service):
    result = transfer_service.transfer("bank_to_cash", Decimal("20"), D, bank_account_id)
    found = transfer_service.find_transfer(result.transfer_ref)
    assert found.direction == TransferDirection.BANK_TO_CASH
    assert found.amount == Decimal("20")
    assert transfer_service.find_transfer("missing") is None


def test_balance_read_waits_for_both_legs(memory_db, identity, setup_ledger):
    account_id = setup_ledger(memory_db, identity)
    balances = BalanceService(memory_db)
    results = {}

    def read_balances():
        results["cash"] = balances.compute_cash_balance()
        results["bank"] = balances.compute_bank_balance(account_id)

    reader = threading.Thread(target=read_balances)
    with memory_db.atomic():
        memory_db.create(
            Collection.CASH_TRANSACTIONS,
            CashTransaction(
                id=None, date=D, amount=Decimal("100.00"), direction=CashDirection.EXPENSE,
                category=TRANSFER_CATEGORY, description="Transfer to Bank", transfer_ref="ref-1",
            ),
        )
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()
        assert results == {}
        memory_db.create(
            Collection.BANK_TRANSACTIONS,
            BankTransaction(
                id=None, date=D, amount=Decimal("100.00"), direction=BankDirection.DEPOSIT,
                bank_account_id=account_id, category=TRANSFER_CATEGORY,
                description="Transfer from Cash", transfer_ref="ref-1",
            ),
        )

    reader.join(timeout=5)
    assert not reader.is_alive()
    assert results == {"cash": Decimal("900.00"), "bank": Decimal("600.00")}


def test_sqlite_failure_reports_rollback_without_compensation(temp_db, identity, setup_ledger, monkeypatch):
    account_id = setup_ledger(temp_db, identity)
    service = TransferService(temp_db, identity)
    original = temp_db.create

    def failing_create(collection, record):
        if collection == Collection.BANK_TRANSACTIONS:
            raise StoreUnavailable("connection lost")
        return original(collection, record)

    monkeypatch.setattr(temp_db, "create", failing_create)
    monkeypatch.setattr(
        service.ledger, "compensate", lambda *args: pytest.fail("compensation on a transactional store")
    )
    with pytest.raises(TransferFailure) as exc_info:
        service.transfer("cash_to_bank", Decimal("100"), D, account_id)

    assert "compensation failed" not in str(exc_info.value)
    assert temp_db.read_all(Collection.CASH_TRANSACTIONS) == []


def test_memory_failure_compensates_first_leg(memory_db, identity, setup_ledger, monkeypatch):
    account_id = setup_ledger(memory_db, identity)
    service = TransferService(memory_db, identity)
    original = memory_db.create

    def failing_create(collection, record):
        if collection == Collection.BANK_TRANSACTIONS:
            raise StoreUnavailable("connection lost")
        return original(collection, record)

    monkeypatch.setattr(memory_db, "create", failing_create)
    with pytest.raises(TransferFailure):
        service.transfer("cash_to_bank", Decimal("100"), D, account_id)

    rows = memory_db.read_all(Collection.CASH_TRANSACTIONS)
    assert len(rows) == 1
    assert rows[0].deleted_at is not None
