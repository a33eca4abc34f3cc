"""Activity log domain service."""

import logging
from datetime import datetime, UTC
from typing import Optional

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.domain.entities import ActivityLogEntry, Actor

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Append-only audit trail of ledger-affecting actions."""

    def __init__(self, db: RecordStore):
        """Initialize activity log service.

        Args:
            db: Record store instance
        """
        self.db = db

    def append(self, actor_id: str, actor_label: str, description: str) -> ActivityLogEntry:
        """Append one entry.

        Raises whatever the store raises; callers that must not fail use
        ``record`` instead.
        """
        entry = ActivityLogEntry(
            id=None,
            timestamp=datetime.now(UTC),
            actor_id=actor_id,
            actor_label=actor_label,
            description=description,
        )
        return self.db.create(Collection.ACTIVITY_LOG, entry)

    def record(self, actor: Actor, description: str) -> Optional[ActivityLogEntry]:
        """Append an entry for an actor, swallowing any logging failure.

        Losing an audit line must never fail the business operation that
        produced it.

        Returns:
            The stored entry, or None if writing it failed
        """
        try:
            return self.append(actor.id, actor.label, description)
        except Exception:
            logger.exception("Failed to write activity log entry: %s", description)
            return None

    def list_entries(self, newest_first: bool = True, limit: Optional[int] = None) -> list[ActivityLogEntry]:
        """List entries in append order or reverse append order.

        Args:
            newest_first: If True, most recent entries come first
            limit: Optional maximum number of entries to return
        """
        entries = self.db.read_all(Collection.ACTIVITY_LOG)
        if newest_first:
            entries.reverse()
        if limit is not None:
            entries = entries[:limit]
        return entries
