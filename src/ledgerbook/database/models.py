"""SQLAlchemy models for ledgerbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def _now() -> datetime:
    return datetime.now(UTC)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class Category(Base):
    """Category model, one namespace per ledger type."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("name", "type", name="uq_category_name_type"),)


class Vendor(Base):
    """Vendor model."""

    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class OpeningBalance(Base):
    """Opening balance line for the cash pool or one bank account."""

    __tablename__ = "initial_balances"

    id = Column(Integer, primary_key=True)
    pool = Column(String, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    set_at = Column(DateTime, default=_now, nullable=False)

    __table_args__ = (UniqueConstraint("pool", "bank_account_id", name="uq_opening_pool_account"),)


class InitialStockItem(Base):
    """Opening stock model."""

    __tablename__ = "initial_stock"

    id = Column(Integer, primary_key=True)
    item_name = Column(String, nullable=False)
    weight = Column(Numeric(14, 3), nullable=False)
    price_per_kg = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)


class StockTransaction(Base):
    """Stock purchase/sale model."""

    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    item_name = Column(String, nullable=False, index=True)
    weight = Column(Numeric(14, 3), nullable=False)
    price_per_kg = Column(Numeric(14, 2), nullable=False)
    kind = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)


class CashTransaction(Base):
    """Cash ledger model."""

    __tablename__ = "cash_transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    direction = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    linked_stock_id = Column(Integer, nullable=True, index=True)
    transfer_ref = Column(String, nullable=True, index=True)


class BankTransaction(Base):
    """Bank ledger model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    direction = Column(String, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now, nullable=False)
    deleted_at = Column(DateTime, nullable=True)
    linked_stock_id = Column(Integer, nullable=True, index=True)
    transfer_ref = Column(String, nullable=True, index=True)


class ActivityLogEntry(Base):
    """Append-only activity log model."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, default=_now, nullable=False)
    actor_id = Column(String, nullable=False)
    actor_label = Column(String, nullable=False)
    description = Column(String, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
