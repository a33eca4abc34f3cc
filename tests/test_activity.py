"""Tests for the activity log."""

from datetime import date
from decimal import Decimal

from ledgerbook.database.base import Collection
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.entities import Actor, Role
from ledgerbook.domain.ledger import LedgerService


def test_append_order(activity_service):
    activity_service.append("u1", "Alice", "first")
    activity_service.append("u2", "Bob", "second")

    newest = activity_service.list_entries()
    assert [e.description for e in newest] == ["second", "first"]
    oldest = activity_service.list_entries(newest_first=False, limit=1)
    assert [e.description for e in oldest] == ["first"]
    assert oldest[0].actor_label == "Alice"
    assert oldest[0].timestamp is not None


def test_mutations_are_logged(temp_db, identity, bank_account_id):
    LedgerService(temp_db, identity).record_cash(date(2024, 1, 1), Decimal("5"), "income", "Sales", "tips")
    entries = ActivityLogService(temp_db).list_entries()
    assert entries[0].description == "Added cash transaction: tips"
    assert entries[0].actor_id == "tester"
    assert entries[0].actor_label == "Test User"


def test_delete_is_logged(temp_db, identity, bank_account_id):
    ledger = LedgerService(temp_db, identity)
    txn = ledger.record_cash(date(2024, 1, 1), Decimal("5"), "income", "Sales")
    ledger.soft_delete("cash", txn.id)
    latest = ActivityLogService(temp_db).list_entries(limit=1)[0]
    assert latest.description == f"Deleted item from cash_transactions with ID: {txn.id}"


def test_log_failure_does_not_fail_the_mutation(temp_db, identity, bank_account_id, monkeypatch, caplog):
    original = temp_db.create

    def failing_create(collection, record):
        if collection == Collection.ACTIVITY_LOG:
            raise RuntimeError("log table locked")
        return original(collection, record)

    monkeypatch.setattr(temp_db, "create", failing_create)
    txn = LedgerService(temp_db, identity).record_cash(date(2024, 1, 1), Decimal("5"), "income", "Sales")

    assert temp_db.get(Collection.CASH_TRANSACTIONS, txn.id) is not None
    assert "Failed to write activity log entry" in caplog.text


def test_record_returns_none_on_failure(memory_db, monkeypatch):
    service = ActivityLogService(memory_db)

    def broken(collection, record):
        raise RuntimeError("boom")

    monkeypatch.setattr(memory_db, "create", broken)
    assert service.record(Actor(id="x", label="X", role=Role.USER), "anything") is None
