"""Snapshot export and import (whole-dataset backup and restore).

A snapshot maps collection names to lists of flat records whose values are
JSON primitives: decimals and dates travel as strings, enumerations as their
values. Import replaces every tracked collection; a collection missing from the
snapshot is cleared and left empty.
"""

import json
import logging
import types
from dataclasses import MISSING, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Union, get_args, get_origin, get_type_hints

from ledgerbook.database.base import Collection, RECORD_TYPES, RecordStore
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.entities import ImportReport, PaymentMethod, as_utc
from ledgerbook.domain.errors import ImportFailure, ImportValidationError
from ledgerbook.domain.identity import IdentityProvider, require_admin
from ledgerbook.domain.validation import (
    to_decimal,
    validate_bank_transaction,
    validate_cash_transaction,
    validate_initial_stock_item,
    validate_opening_balance,
    validate_stock_transaction,
)

logger = logging.getLogger(__name__)

# Insert order; clearing runs in reverse so referencing rows go first.
SNAPSHOT_COLLECTIONS = (
    Collection.BANK_ACCOUNTS,
    Collection.CATEGORIES,
    Collection.VENDORS,
    Collection.INITIAL_BALANCES,
    Collection.INITIAL_STOCK,
    Collection.STOCK_TRANSACTIONS,
    Collection.CASH_TRANSACTIONS,
    Collection.BANK_TRANSACTIONS,
)

_VALIDATORS = {
    Collection.INITIAL_BALANCES: validate_opening_balance,
    Collection.INITIAL_STOCK: validate_initial_stock_item,
    Collection.STOCK_TRANSACTIONS: validate_stock_transaction,
    Collection.CASH_TRANSACTIONS: validate_cash_transaction,
    Collection.BANK_TRANSACTIONS: validate_bank_transaction,
}

# Fields that must name a row of another collection in the same snapshot
_REFERENCES = {
    Collection.INITIAL_BALANCES: [("bank_account_id", Collection.BANK_ACCOUNTS)],
    Collection.STOCK_TRANSACTIONS: [("bank_account_id", Collection.BANK_ACCOUNTS)],
    Collection.CASH_TRANSACTIONS: [("linked_stock_id", Collection.STOCK_TRANSACTIONS)],
    Collection.BANK_TRANSACTIONS: [
        ("bank_account_id", Collection.BANK_ACCOUNTS),
        ("linked_stock_id", Collection.STOCK_TRANSACTIONS),
    ],
}

# Fields whose values must be unique inside a collection
_UNIQUE_KEYS = {
    Collection.BANK_ACCOUNTS: ("name",),
    Collection.CATEGORIES: ("name", "type"),
    Collection.VENDORS: ("name",),
    Collection.INITIAL_BALANCES: ("pool", "bank_account_id"),
}


def encode_value(value: Any) -> Any:
    """Convert a record field to a JSON primitive."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def encode_record(record: Any) -> dict[str, Any]:
    """Convert a record to a flat mapping of field name to primitive value."""
    return {f.name: encode_value(getattr(record, f.name)) for f in fields(record)}


def _decode_value(hint: Any, value: Any, name: str) -> Any:
    optional = False
    if get_origin(hint) in (Union, types.UnionType):
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        optional = len(args) < len(get_args(hint))
        hint = args[0]

    if value is None:
        if optional:
            return None
        raise ValueError(f"field '{name}' is required")

    if hint is Decimal:
        return to_decimal(value, name)
    if hint is datetime:
        if isinstance(value, datetime):
            return as_utc(value)
        if isinstance(value, str):
            return as_utc(datetime.fromisoformat(value))
    elif hint is date:
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return date.fromisoformat(value)
    elif isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    elif hint is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif hint is str:
        if isinstance(value, str):
            return value
    raise ValueError(f"field '{name}' has invalid value {value!r}")


def decode_record(record_type: type, data: Mapping[str, Any]) -> Any:
    """Build a typed record from a flat mapping.

    Raises:
        ValueError: If a field is missing, unknown or has the wrong type
    """
    hints = get_type_hints(record_type)
    known = {f.name for f in fields(record_type)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown field(s): {', '.join(unknown)}")

    kwargs = {}
    for f in fields(record_type):
        if f.name not in data:
            if f.default is MISSING and f.default_factory is MISSING:
                raise ValueError(f"field '{f.name}' is missing")
            continue
        kwargs[f.name] = _decode_value(hints[f.name], data[f.name], f.name)
    return record_type(**kwargs)


def _check_references(records: dict[Collection, list], problems: list[str]) -> None:
    ids = {collection: {row.id for row in rows} for collection, rows in records.items()}
    for collection, references in _REFERENCES.items():
        for row in records.get(collection, []):
            for field_name, target in references:
                value = getattr(row, field_name)
                if value is not None and value not in ids.get(target, set()):
                    problems.append(
                        f"{collection.value} {row.id}: {field_name} {value} not found in {target.value}"
                    )


def _check_unique(collection: Collection, rows: list, problems: list[str]) -> None:
    seen_ids: set[int] = set()
    seen_keys: set[tuple] = set()
    key_fields = _UNIQUE_KEYS.get(collection)
    for row in rows:
        if row.id in seen_ids:
            problems.append(f"{collection.value}: duplicate id {row.id}")
        seen_ids.add(row.id)
        if key_fields:
            key = tuple(encode_value(getattr(row, name)) for name in key_fields)
            if key in seen_keys:
                problems.append(f"{collection.value}: duplicate {'/'.join(key_fields)} {key}")
            seen_keys.add(key)


def validate_snapshot(snapshot: Any) -> dict[Collection, list]:
    """Decode and check a snapshot without touching storage.

    Returns:
        Typed records per collection present in the snapshot

    Raises:
        ImportValidationError: Listing every problem found
    """
    if not isinstance(snapshot, Mapping):
        raise ImportValidationError(["snapshot must be a mapping of collection name to records"])

    problems: list[str] = []
    records: dict[Collection, list] = {}
    tracked = {collection.value: collection for collection in SNAPSHOT_COLLECTIONS}

    for name, rows in snapshot.items():
        collection = tracked.get(name)
        if collection is None:
            problems.append(f"unknown collection '{name}'")
            continue
        if not isinstance(rows, list):
            problems.append(f"{name}: expected a list of records")
            continue

        decoded = []
        for index, data in enumerate(rows):
            if not isinstance(data, Mapping):
                problems.append(f"{name}[{index}]: expected a mapping")
                continue
            try:
                record = decode_record(RECORD_TYPES[collection], data)
                if record.id is None:
                    raise ValueError("field 'id' is required")
                validator = _VALIDATORS.get(collection)
                if validator is not None:
                    validator(record)
            except (ValueError, TypeError) as exc:
                problems.append(f"{name}[{index}]: {exc}")
                continue
            decoded.append(record)

        _check_unique(collection, decoded, problems)
        records[collection] = decoded

    _check_references(records, problems)

    cash_openings = [
        row for row in records.get(Collection.INITIAL_BALANCES, []) if row.pool == PaymentMethod.CASH
    ]
    if len(cash_openings) > 1:
        problems.append("initial_balances: more than one cash opening balance")

    if problems:
        raise ImportValidationError(problems)
    return records


class SnapshotService:
    """Exports the full dataset and re-imports it wholesale."""

    def __init__(self, db: RecordStore, identity: IdentityProvider):
        """Initialize snapshot service.

        Args:
            db: Record store instance
            identity: Provider of the acting user
        """
        self.db = db
        self.identity = identity
        self.activity = ActivityLogService(db)

    def export_all(self) -> dict[str, list[dict[str, Any]]]:
        """Return every record of every tracked collection, deleted rows included."""
        actor = self.identity.current_actor()
        with self.db.atomic():
            snapshot = {
                collection.value: [encode_record(row) for row in self.db.read_all(collection)]
                for collection in SNAPSHOT_COLLECTIONS
            }
        logger.info(
            "Exported %d records", sum(len(rows) for rows in snapshot.values())
        )
        self.activity.record(actor, "Exported all data to a backup file.")
        return snapshot

    def import_all(self, snapshot: Mapping[str, Any]) -> ImportReport:
        """Replace the whole dataset with the snapshot's contents.

        Collections absent from the snapshot are cleared. The activity log is
        not part of a snapshot and is kept.

        Raises:
            PermissionDeniedError: If the actor is not an admin
            ImportValidationError: If the snapshot is malformed (nothing changed)
            ImportFailure: If writing failed; ``replaced`` names the
                collections that hold the new data
        """
        actor = require_admin(self.identity, "import data")
        records = validate_snapshot(snapshot)

        for collection in SNAPSHOT_COLLECTIONS:
            if collection not in records:
                logger.info("Snapshot has no %s; the collection will be emptied", collection.value)

        if self.db.supports_transactions:
            self._replace_all_at_once(records)
        else:
            self._replace_one_by_one(records)

        counts = {collection.value: len(records.get(collection, [])) for collection in SNAPSHOT_COLLECTIONS}
        logger.info("Imported %d records", sum(counts.values()))
        self.activity.record(actor, "Imported data from a backup file, overwriting existing data.")
        return ImportReport(
            replaced=tuple(collection.value for collection in SNAPSHOT_COLLECTIONS),
            record_counts=counts,
        )

    def _replace_all_at_once(self, records: dict[Collection, list]) -> None:
        try:
            with self.db.atomic():
                for collection in reversed(SNAPSHOT_COLLECTIONS):
                    self.db.clear(collection)
                for collection in SNAPSHOT_COLLECTIONS:
                    self.db.bulk_insert(collection, records.get(collection, []))
        except Exception as exc:
            logger.error("Import rolled back: %s", exc)
            raise ImportFailure(f"Import failed, no data was changed: {exc}") from exc

    def _replace_one_by_one(self, records: dict[Collection, list]) -> None:
        replaced: list[str] = []
        for collection in SNAPSHOT_COLLECTIONS:
            with self.db.atomic():
                previous = self.db.read_all(collection)
                try:
                    self.db.clear(collection)
                    self.db.bulk_insert(collection, records.get(collection, []))
                except Exception as exc:
                    self._put_back(collection, previous)
                    done = ", ".join(replaced) or "none"
                    raise ImportFailure(
                        f"Import failed while writing {collection.value}: {exc}. "
                        f"Collections already replaced: {done}",
                        replaced=replaced,
                        failed_collection=collection.value,
                    ) from exc
            replaced.append(collection.value)
            logger.debug("Replaced %s", collection.value)

    def _put_back(self, collection: Collection, previous: list) -> None:
        try:
            self.db.clear(collection)
            self.db.bulk_insert(collection, previous)
        except Exception:
            logger.critical("Could not restore %s after a failed import", collection.value, exc_info=True)

    def export_to_file(self, path: str | Path) -> int:
        """Write a JSON backup file and return the number of records written."""
        snapshot = self.export_all()
        write_backup(path, snapshot)
        return sum(len(rows) for rows in snapshot.values())

    def import_from_file(self, path: str | Path) -> ImportReport:
        """Replace the dataset with the contents of a JSON backup file."""
        return self.import_all(read_backup(path))


def write_backup(path: str | Path, snapshot: Mapping[str, Any]) -> None:
    """Write a snapshot to a JSON backup file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2)


def read_backup(path: str | Path) -> Any:
    """Load a backup file.

    Raises:
        ImportValidationError: If the file is not valid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as exc:
        raise ImportValidationError([f"backup file is not valid JSON: {exc}"]) from exc
