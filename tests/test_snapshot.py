"""Tests for snapshot export and import."""

import json
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from ledgerbook.database.base import Collection
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.entities import CashDirection, CashTransaction, Vendor
from ledgerbook.domain.errors import (
    ImportFailure,
    ImportValidationError,
    PermissionDeniedError,
    StoreUnavailable,
)
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.domain.snapshot import (
    SNAPSHOT_COLLECTIONS,
    SnapshotService,
    decode_record,
    encode_record,
    validate_snapshot,
)
from ledgerbook.domain.transfer import TransferService

D = date(2024, 3, 15)


def populate(db, identity, setup_ledger):
    """Fill a store with one row of every kind, including a deleted one."""
    account_id = setup_ledger(db, identity)
    ledger = LedgerService(db, identity)
    ledger.add_initial_stock_item("Wheat", Decimal("5"), Decimal("10"))
    ledger.record_cash(D, Decimal("200"), "expense", "Rent")
    deleted = ledger.record_cash(D, Decimal("15"), "income", "Sales", "refund")
    ledger.soft_delete("cash", deleted.id)
    ledger.record_bank(D, Decimal("300"), "deposit", account_id, "Sales")
    ledger.record_stock(D, "Rice", Decimal("50"), Decimal("20"), "purchase", "cash")
    ledger.record_stock(D, "Rice", Decimal("20"), Decimal("25"), "sale", "bank", bank_account_id=account_id)
    TransferService(db, identity).transfer("cash_to_bank", Decimal("100"), D, account_id)
    return account_id


def test_export_contains_every_collection(temp_db, identity, setup_ledger):
    populate(temp_db, identity, setup_ledger)
    snapshot = SnapshotService(temp_db, identity).export_all()

    assert list(snapshot) == [collection.value for collection in SNAPSHOT_COLLECTIONS]
    assert "activity_log" not in snapshot
    assert len(snapshot["cash_transactions"]) == 4
    assert sum(1 for row in snapshot["cash_transactions"] if row["deleted_at"] is not None) == 1
    # JSON serializable as-is
    json.dumps(snapshot)


def test_export_import_round_trip(temp_db, make_sqlite_db, identity, setup_ledger):
    populate(temp_db, identity, setup_ledger)
    exported = SnapshotService(temp_db, identity).export_all()

    target = make_sqlite_db()
    setup_ledger(target, identity, cash="1", bank="1")
    report = SnapshotService(target, identity).import_all(exported)

    assert report.replaced == tuple(collection.value for collection in SNAPSHOT_COLLECTIONS)
    assert report.total_records == sum(len(rows) for rows in exported.values())
    for collection in SNAPSHOT_COLLECTIONS:
        source_rows = temp_db.read_all(collection)
        target_rows = target.read_all(collection)
        assert {encode_record(r)["id"]: encode_record(r) for r in target_rows} == {
            encode_record(r)["id"]: encode_record(r) for r in source_rows
        }

    balances = BalanceService(target)
    assert balances.compute_cash_balance() == BalanceService(temp_db).compute_cash_balance()
    assert balances.compute_stock_quantity("Rice") == Decimal("30")


def test_import_into_memory_store(temp_db, memory_db, identity, setup_ledger):
    account_id = populate(temp_db, identity, setup_ledger)
    exported = SnapshotService(temp_db, identity).export_all()
    SnapshotService(memory_db, identity).import_all(exported)

    assert BalanceService(memory_db).compute_bank_balance(account_id) == BalanceService(
        temp_db
    ).compute_bank_balance(account_id)
    # Ids keep counting after the imported rows
    LedgerService(memory_db, identity).record_cash(D, Decimal("1"), "income", "Sales")
    ids = [row.id for row in memory_db.read_all(Collection.CASH_TRANSACTIONS)]
    assert len(ids) == len(set(ids))


def test_missing_collection_is_cleared(temp_db, identity, setup_ledger):
    account_id = setup_ledger(temp_db, identity)
    ledger = LedgerService(temp_db, identity)
    ledger.record_stock(D, "Rice", Decimal("50"), Decimal("20"), "purchase", "cash")
    assert temp_db.read_all(Collection.STOCK_TRANSACTIONS)

    snapshot = {
        "bank_accounts": [{"id": account_id, "name": "Main Bank", "created_at": None}],
        "initial_balances": [{"id": 1, "pool": "cash", "amount": "250.00"}],
        "cash_transactions": [
            {
                "id": 7,
                "date": "2024-03-01",
                "amount": "20.00",
                "direction": "income",
                "category": "Sales",
                "description": "",
            }
        ],
    }
    SnapshotService(temp_db, identity).import_all(snapshot)

    assert temp_db.read_all(Collection.STOCK_TRANSACTIONS) == []
    assert temp_db.read_all(Collection.CATEGORIES) == []
    assert BalanceService(temp_db).compute_cash_balance() == Decimal("270")


def test_activity_log_survives_import(temp_db, identity, setup_ledger):
    populate(temp_db, identity, setup_ledger)
    service = SnapshotService(temp_db, identity)
    before = len(ActivityLogService(temp_db).list_entries())
    service.import_all(service.export_all())

    entries = ActivityLogService(temp_db).list_entries()
    assert len(entries) == before + 2
    assert entries[0].description == "Imported data from a backup file, overwriting existing data."
    assert entries[1].description == "Exported all data to a backup file."


@pytest.mark.parametrize(
    "snapshot, problem",
    [
        ([], "mapping"),
        ({"ledgers": []}, "unknown collection"),
        ({"cash_transactions": {}}, "expected a list"),
        ({"cash_transactions": [{"id": 1, "date": "2024-01-01"}]}, "missing"),
        (
            {
                "cash_transactions": [
                    {"id": 1, "date": "2024-01-01", "amount": "-5", "direction": "income",
                     "category": "Sales", "description": ""}
                ]
            },
            "amount",
        ),
        (
            {
                "bank_transactions": [
                    {"id": 1, "date": "2024-01-01", "amount": "5", "direction": "deposit",
                     "bank_account_id": 3, "category": "Sales", "description": ""}
                ]
            },
            "not found in bank_accounts",
        ),
        (
            {"vendors": [{"id": 1, "name": "A"}, {"id": 1, "name": "B"}]},
            "duplicate id",
        ),
    ],
)
def test_invalid_snapshot_changes_nothing(temp_db, identity, setup_ledger, snapshot, problem):
    setup_ledger(temp_db, identity)
    service = SnapshotService(temp_db, identity)
    before = service.export_all()

    with pytest.raises(ImportValidationError) as exc_info:
        service.import_all(snapshot)

    assert any(problem in text for text in exc_info.value.problems)
    assert service.export_all() == before


def test_import_requires_admin(temp_db, identity, user_identity, setup_ledger):
    setup_ledger(temp_db, identity)
    snapshot = SnapshotService(temp_db, identity).export_all()
    with pytest.raises(PermissionDeniedError):
        SnapshotService(temp_db, user_identity).import_all(snapshot)


def test_transactional_failure_rolls_back(temp_db, identity, setup_ledger, monkeypatch):
    populate(temp_db, identity, setup_ledger)
    service = SnapshotService(temp_db, identity)
    snapshot = service.export_all()
    cash_before = BalanceService(temp_db).compute_cash_balance()
    original = temp_db.bulk_insert

    def failing_bulk_insert(collection, records):
        if collection == Collection.CASH_TRANSACTIONS:
            raise StoreUnavailable("disk full")
        return original(collection, records)

    monkeypatch.setattr(temp_db, "bulk_insert", failing_bulk_insert)
    with pytest.raises(ImportFailure) as exc_info:
        service.import_all(snapshot)

    assert exc_info.value.replaced == ()
    assert BalanceService(temp_db).compute_cash_balance() == cash_before
    assert len(temp_db.read_all(Collection.STOCK_TRANSACTIONS)) == 2


def test_non_transactional_failure_reports_progress(memory_db, identity, setup_ledger, monkeypatch):
    populate(memory_db, identity, setup_ledger)
    service = SnapshotService(memory_db, identity)
    snapshot = service.export_all()
    old_cash = memory_db.read_all(Collection.CASH_TRANSACTIONS)
    original = memory_db.bulk_insert
    failed = []

    def failing_bulk_insert(collection, records):
        if collection == Collection.CASH_TRANSACTIONS and not failed:
            failed.append(collection)
            raise RuntimeError("out of memory")
        return original(collection, records)

    monkeypatch.setattr(memory_db, "bulk_insert", failing_bulk_insert)
    with pytest.raises(ImportFailure) as exc_info:
        service.import_all(snapshot)

    assert exc_info.value.failed_collection == "cash_transactions"
    assert exc_info.value.replaced == (
        "bank_accounts",
        "categories",
        "vendors",
        "initial_balances",
        "initial_stock",
        "stock_transactions",
    )
    assert memory_db.read_all(Collection.CASH_TRANSACTIONS) == old_cash


def test_file_round_trip(temp_db, identity, setup_ledger, tmp_path):
    populate(temp_db, identity, setup_ledger)
    service = SnapshotService(temp_db, identity)
    path = tmp_path / "backup.json"
    count = service.export_to_file(path)
    assert count == sum(len(rows) for rows in json.loads(path.read_text()).values())

    report = service.import_from_file(path)
    assert report.total_records == count


def test_unreadable_backup_file(temp_db, identity, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ImportValidationError):
        SnapshotService(temp_db, identity).import_from_file(path)


def test_record_codec():
    txn = CashTransaction(
        id=3,
        date=D,
        amount=Decimal("12.50"),
        direction=CashDirection.EXPENSE,
        category="Rent",
        description="x",
    )
    data = encode_record(txn)
    assert data["amount"] == "12.50"
    assert data["direction"] == "expense"
    assert data["date"] == "2024-03-15"
    assert decode_record(CashTransaction, data) == txn

    with pytest.raises(ValueError):
        decode_record(CashTransaction, {**data, "colour": "red"})
    with pytest.raises(ValueError):
        decode_record(CashTransaction, {**data, "date": "2024-03-15T10:00:00"})


def test_validate_snapshot_checks_stock_links():
    with pytest.raises(ImportValidationError) as exc_info:
        validate_snapshot(
            {
                "cash_transactions": [
                    {"id": 1, "date": "2024-01-01", "amount": "5", "direction": "expense",
                     "category": "Stock Purchase", "description": "", "linked_stock_id": 9}
                ]
            }
        )
    assert "linked_stock_id 9 not found in stock_transactions" in exc_info.value.problems[0]


@pytest.mark.parametrize(
    "snapshot, problem",
    [
        (
            {
                "cash_transactions": [
                    {"id": 1, "date": "2024-01-01", "amount": "0.004", "direction": "income",
                     "category": "Sales", "description": ""}
                ]
            },
            "amount must have at most 2 decimal places",
        ),
        (
            {
                "cash_transactions": [
                    {"id": 1, "date": "2024-01-01", "amount": "1.005", "direction": "income",
                     "category": "Sales", "description": ""}
                ]
            },
            "amount must have at most 2 decimal places",
        ),
        (
            {
                "stock_transactions": [
                    {"id": 1, "date": "2024-01-01", "item_name": "Rice", "weight": "0.0004",
                     "price_per_kg": "20", "kind": "purchase", "payment_method": "cash"}
                ]
            },
            "weight must have at most 3 decimal places",
        ),
        (
            {"initial_balances": [{"id": 1, "pool": "cash", "amount": "10.001"}]},
            "amount must have at most 2 decimal places",
        ),
    ],
)
def test_values_finer_than_stored_precision_are_rejected(
    temp_db, identity, setup_ledger, snapshot, problem
):
    setup_ledger(temp_db, identity)
    service = SnapshotService(temp_db, identity)
    before = service.export_all()

    with pytest.raises(ImportValidationError) as exc_info:
        service.import_all(snapshot)

    assert any(problem in text for text in exc_info.value.problems)
    assert service.export_all() == before


def test_decoded_timestamps_are_utc():
    data = {"id": 1, "name": "Acme", "created_at": "2024-03-01T09:30:00"}
    vendor = decode_record(Vendor, data)
    assert vendor.created_at == datetime(2024, 3, 1, 9, 30, tzinfo=UTC)

    shifted = decode_record(Vendor, {**data, "created_at": "2024-03-01T11:30:00+02:00"})
    assert shifted.created_at == vendor.created_at
    assert shifted.created_at.tzinfo is UTC


def test_recycle_bin_after_sqlite_backup_into_memory(temp_db, memory_db, identity, setup_ledger):
    populate(temp_db, identity, setup_ledger)
    SnapshotService(memory_db, identity).import_all(SnapshotService(temp_db, identity).export_all())

    ledger = LedgerService(memory_db, identity)
    fresh = ledger.record_cash(D, Decimal("3"), "income", "Sales", "late")
    ledger.soft_delete("cash", fresh.id)

    deleted = ledger.list_deleted()
    assert deleted[0][1].id == fresh.id
    assert all(row.deleted_at.tzinfo is not None for _, row in deleted)
