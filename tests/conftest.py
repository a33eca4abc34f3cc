"""Shared pytest fixtures for ledgerbook tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.database.factories import create_memory_database, create_sqlite_database
from ledgerbook.domain.account import BankAccountService
from ledgerbook.domain.activity import ActivityLogService
from ledgerbook.domain.balance import BalanceService
from ledgerbook.domain.category import CategoryService
from ledgerbook.domain.entities import Role
from ledgerbook.domain.identity import StaticIdentityProvider
from ledgerbook.domain.ledger import LedgerService
from ledgerbook.domain.snapshot import SnapshotService
from ledgerbook.domain.transfer import TransferService

TODAY = date(2024, 3, 15)


@pytest.fixture
def db_path():
    """Path to a temporary, empty database file."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)


@pytest.fixture
def make_sqlite_db():
    """Factory for additional temporary SQLite databases."""
    created = []

    def factory():
        fd, path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        db = create_sqlite_database(database_path=path)
        db.database_path = path
        db.connect()
        db.initialize_schema()
        created.append(db)
        return db

    yield factory

    for db in created:
        db.disconnect()
        if os.path.exists(db.database_path):
            os.unlink(db.database_path)


@pytest.fixture
def temp_db(make_sqlite_db):
    """Create a temporary database for testing."""
    return make_sqlite_db()


@pytest.fixture
def memory_db():
    """Create an in-memory record store."""
    return create_memory_database()


@pytest.fixture(params=["sqlite", "memory"])
def any_db(request, make_sqlite_db):
    """Run a test against both record store implementations."""
    if request.param == "sqlite":
        return make_sqlite_db()
    return create_memory_database()


@pytest.fixture
def identity():
    """Admin actor used by most tests."""
    return StaticIdentityProvider("tester", label="Test User", role=Role.ADMIN)


@pytest.fixture
def user_identity():
    """Actor without admin rights."""
    return StaticIdentityProvider("clerk", role=Role.USER)


def _setup_ledger(db, identity, cash="1000", bank="500"):
    """Create "Main Bank", the default categories and the opening balances.

    Returns:
        ID of the bank account
    """
    account_id = BankAccountService(db, identity).create_account("Main Bank")
    CategoryService(db, identity).init_defaults()
    LedgerService(db, identity).set_initial_balance(Decimal(cash), {account_id: Decimal(bank)})
    return account_id


@pytest.fixture
def bank_account_id(temp_db, identity):
    """Initialized SQLite ledger: cash 1000, "Main Bank" 500."""
    return _setup_ledger(temp_db, identity)


@pytest.fixture
def setup_ledger():
    """Helper that initializes any store the way bank_account_id does."""
    return _setup_ledger


@pytest.fixture
def ledger_service(temp_db, identity):
    return LedgerService(temp_db, identity)


@pytest.fixture
def balance_service(temp_db):
    return BalanceService(temp_db)


@pytest.fixture
def transfer_service(temp_db, identity):
    return TransferService(temp_db, identity)


@pytest.fixture
def snapshot_service(temp_db, identity):
    return SnapshotService(temp_db, identity)


@pytest.fixture
def activity_service(temp_db):
    return ActivityLogService(temp_db)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
