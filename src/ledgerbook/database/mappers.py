"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enumerations are stored as their
string values and come back as enum members, and timestamps come back as UTC
whether or not the backend kept their timezone. Everything else maps one to one.
"""

from ledgerbook.domain import entities as domain
from ledgerbook.database.models import (
    ActivityLogEntry as ORMActivityLogEntry,
    BankAccount as ORMBankAccount,
    BankTransaction as ORMBankTransaction,
    CashTransaction as ORMCashTransaction,
    Category as ORMCategory,
    InitialStockItem as ORMInitialStockItem,
    OpeningBalance as ORMOpeningBalance,
    StockTransaction as ORMStockTransaction,
    Vendor as ORMVendor,
)


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        name=orm_account.name,
        created_at=domain.as_utc(orm_account.created_at),
    )


def bank_account_to_orm(account: domain.BankAccount) -> ORMBankAccount:
    return ORMBankAccount(id=account.id, name=account.name, created_at=account.created_at)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.CategoryType(orm_category.type),
        created_at=domain.as_utc(orm_category.created_at),
    )


def category_to_orm(category: domain.Category) -> ORMCategory:
    return ORMCategory(
        id=category.id,
        name=category.name,
        type=category.type.value,
        created_at=category.created_at,
    )


def vendor_to_domain(orm_vendor: ORMVendor) -> domain.Vendor:
    """Convert SQLAlchemy Vendor model to domain Vendor entity."""
    return domain.Vendor(
        id=orm_vendor.id,
        name=orm_vendor.name,
        created_at=domain.as_utc(orm_vendor.created_at),
    )


def vendor_to_orm(vendor: domain.Vendor) -> ORMVendor:
    return ORMVendor(id=vendor.id, name=vendor.name, created_at=vendor.created_at)


def opening_balance_to_domain(orm_opening: ORMOpeningBalance) -> domain.OpeningBalance:
    """Convert SQLAlchemy OpeningBalance model to domain OpeningBalance entity."""
    return domain.OpeningBalance(
        id=orm_opening.id,
        pool=domain.PaymentMethod(orm_opening.pool),
        amount=orm_opening.amount,
        bank_account_id=orm_opening.bank_account_id,
        set_at=domain.as_utc(orm_opening.set_at),
    )


def opening_balance_to_orm(opening: domain.OpeningBalance) -> ORMOpeningBalance:
    return ORMOpeningBalance(
        id=opening.id,
        pool=opening.pool.value,
        amount=opening.amount,
        bank_account_id=opening.bank_account_id,
        set_at=opening.set_at,
    )


def initial_stock_to_domain(orm_item: ORMInitialStockItem) -> domain.InitialStockItem:
    """Convert SQLAlchemy InitialStockItem model to domain InitialStockItem entity."""
    return domain.InitialStockItem(
        id=orm_item.id,
        item_name=orm_item.item_name,
        weight=orm_item.weight,
        price_per_kg=orm_item.price_per_kg,
        created_at=domain.as_utc(orm_item.created_at),
    )


def initial_stock_to_orm(item: domain.InitialStockItem) -> ORMInitialStockItem:
    return ORMInitialStockItem(
        id=item.id,
        item_name=item.item_name,
        weight=item.weight,
        price_per_kg=item.price_per_kg,
        created_at=item.created_at,
    )


def stock_transaction_to_domain(orm_txn: ORMStockTransaction) -> domain.StockTransaction:
    """Convert SQLAlchemy StockTransaction model to domain StockTransaction entity."""
    return domain.StockTransaction(
        id=orm_txn.id,
        date=orm_txn.date,
        item_name=orm_txn.item_name,
        weight=orm_txn.weight,
        price_per_kg=orm_txn.price_per_kg,
        kind=domain.StockKind(orm_txn.kind),
        payment_method=domain.PaymentMethod(orm_txn.payment_method),
        bank_account_id=orm_txn.bank_account_id,
        description=orm_txn.description,
        created_at=domain.as_utc(orm_txn.created_at),
        deleted_at=domain.as_utc(orm_txn.deleted_at),
    )


def stock_transaction_to_orm(txn: domain.StockTransaction) -> ORMStockTransaction:
    return ORMStockTransaction(
        id=txn.id,
        date=txn.date,
        item_name=txn.item_name,
        weight=txn.weight,
        price_per_kg=txn.price_per_kg,
        kind=txn.kind.value,
        payment_method=txn.payment_method.value,
        bank_account_id=txn.bank_account_id,
        description=txn.description,
        created_at=txn.created_at,
        deleted_at=txn.deleted_at,
    )


def cash_transaction_to_domain(orm_txn: ORMCashTransaction) -> domain.CashTransaction:
    """Convert SQLAlchemy CashTransaction model to domain CashTransaction entity."""
    return domain.CashTransaction(
        id=orm_txn.id,
        date=orm_txn.date,
        amount=orm_txn.amount,
        direction=domain.CashDirection(orm_txn.direction),
        category=orm_txn.category,
        description=orm_txn.description,
        created_at=domain.as_utc(orm_txn.created_at),
        deleted_at=domain.as_utc(orm_txn.deleted_at),
        linked_stock_id=orm_txn.linked_stock_id,
        transfer_ref=orm_txn.transfer_ref,
    )


def cash_transaction_to_orm(txn: domain.CashTransaction) -> ORMCashTransaction:
    return ORMCashTransaction(
        id=txn.id,
        date=txn.date,
        amount=txn.amount,
        direction=txn.direction.value,
        category=txn.category,
        description=txn.description,
        created_at=txn.created_at,
        deleted_at=txn.deleted_at,
        linked_stock_id=txn.linked_stock_id,
        transfer_ref=txn.transfer_ref,
    )


def bank_transaction_to_domain(orm_txn: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    return domain.BankTransaction(
        id=orm_txn.id,
        date=orm_txn.date,
        amount=orm_txn.amount,
        direction=domain.BankDirection(orm_txn.direction),
        bank_account_id=orm_txn.bank_account_id,
        category=orm_txn.category,
        description=orm_txn.description,
        created_at=domain.as_utc(orm_txn.created_at),
        deleted_at=domain.as_utc(orm_txn.deleted_at),
        linked_stock_id=orm_txn.linked_stock_id,
        transfer_ref=orm_txn.transfer_ref,
    )


def bank_transaction_to_orm(txn: domain.BankTransaction) -> ORMBankTransaction:
    return ORMBankTransaction(
        id=txn.id,
        date=txn.date,
        amount=txn.amount,
        direction=txn.direction.value,
        bank_account_id=txn.bank_account_id,
        category=txn.category,
        description=txn.description,
        created_at=txn.created_at,
        deleted_at=txn.deleted_at,
        linked_stock_id=txn.linked_stock_id,
        transfer_ref=txn.transfer_ref,
    )


def activity_entry_to_domain(orm_entry: ORMActivityLogEntry) -> domain.ActivityLogEntry:
    """Convert SQLAlchemy ActivityLogEntry model to domain ActivityLogEntry entity."""
    return domain.ActivityLogEntry(
        id=orm_entry.id,
        timestamp=domain.as_utc(orm_entry.timestamp),
        actor_id=orm_entry.actor_id,
        actor_label=orm_entry.actor_label,
        description=orm_entry.description,
    )


def activity_entry_to_orm(entry: domain.ActivityLogEntry) -> ORMActivityLogEntry:
    return ORMActivityLogEntry(
        id=entry.id,
        timestamp=entry.timestamp,
        actor_id=entry.actor_id,
        actor_label=entry.actor_label,
        description=entry.description,
    )
