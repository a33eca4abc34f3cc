"""In-memory record store implementation."""

import logging
from contextlib import contextmanager
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional

from ledgerbook.database.base import (
    Collection,
    RECORD_TYPES,
    Record,
    RecordStore,
    SOFT_DELETABLE,
    ensure_soft_deletable,
    stamp_new_record,
)
from ledgerbook.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


class InMemoryDatabase(RecordStore):
    """Dictionary-backed implementation of the RecordStore interface.

    Records are immutable dataclasses, so storing them directly is safe.
    ``atomic()`` only serializes callers; there is no rollback.
    """

    supports_transactions = False

    def __init__(self):
        super().__init__()
        self._rows: dict[Collection, dict[int, Any]] = {}
        self._next_ids: dict[Collection, int] = {}

    def connect(self) -> None:
        """Connect to the store."""
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    def initialize_schema(self) -> None:
        """Create an empty table per collection."""
        with self._lock:
            for collection in Collection:
                self._rows.setdefault(collection, {})
                self._next_ids.setdefault(collection, 1)

    def _table(self, collection: Collection) -> dict[int, Any]:
        if collection not in self._rows:
            self.initialize_schema()
        return self._rows[collection]

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            yield

    def create(self, collection: Collection, record: Record) -> Record:
        with self._lock:
            table = self._table(collection)
            record_id = self._next_ids[collection]
            self._next_ids[collection] = record_id + 1
            stored = replace(stamp_new_record(record), id=record_id)
            table[record_id] = stored
            logger.debug("Created %s %s", collection.value, record_id)
            return stored

    def get(self, collection: Collection, record_id: int) -> Optional[Record]:
        with self._lock:
            return self._table(collection).get(record_id)

    def read_live(
        self, collection: Collection, filters: Optional[Mapping[str, Any]] = None
    ) -> list[Record]:
        with self._lock:
            rows = [self._table(collection)[key] for key in sorted(self._table(collection))]
            if collection in SOFT_DELETABLE:
                rows = [row for row in rows if row.deleted_at is None]
            if filters:
                rows = [
                    row
                    for row in rows
                    if all(getattr(row, key) == value for key, value in filters.items())
                ]
            return rows

    def read_all(self, collection: Collection) -> list[Record]:
        with self._lock:
            table = self._table(collection)
            return [table[key] for key in sorted(table)]

    def update(self, collection: Collection, record_id: int, **changes: Any) -> Record:
        with self._lock:
            if "id" in changes:
                raise ValueError("Record ids cannot be changed")
            table = self._table(collection)
            if record_id not in table:
                raise NotFoundError(f"{collection.value} record {record_id} not found")
            known = {f.name for f in fields(RECORD_TYPES[collection])}
            for key in changes:
                if key not in known:
                    raise ValueError(f"Unknown field '{key}' for {collection.value}")
            table[record_id] = replace(table[record_id], **changes)
            return table[record_id]

    def soft_delete(self, collection: Collection, record_id: int, deleted_at: datetime) -> None:
        ensure_soft_deletable(collection)
        self.update(collection, record_id, deleted_at=deleted_at)

    def restore(self, collection: Collection, record_id: int) -> None:
        ensure_soft_deletable(collection)
        self.update(collection, record_id, deleted_at=None)

    def clear(self, collection: Collection) -> None:
        with self._lock:
            self._table(collection).clear()

    def bulk_insert(self, collection: Collection, records: list[Record]) -> None:
        with self._lock:
            table = self._table(collection)
            for record in records:
                if record.id is None:
                    raise ValueError(f"Bulk insert into {collection.value} requires record ids")
                if record.id in table:
                    raise ValueError(f"Duplicate id {record.id} in {collection.value}")
            for record in records:
                table[record.id] = stamp_new_record(record)
            if table:
                self._next_ids[collection] = max(self._next_ids[collection], max(table) + 1)
