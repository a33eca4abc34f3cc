"""Database layer for ledgerbook application."""

from ledgerbook.database.base import Collection, RecordStore
from ledgerbook.database.factories import create_memory_database, create_sqlite_database

__all__ = ["Collection", "RecordStore", "create_memory_database", "create_sqlite_database"]
