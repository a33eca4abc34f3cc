"""Value checks shared by the ledger and the snapshot importer.

Every check raises ValidationError naming the offending field.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from ledgerbook.domain.entities import (
    BankTransaction,
    CashTransaction,
    InitialStockItem,
    OpeningBalance,
    PaymentMethod,
    StockTransaction,
    kilograms,
    money,
)
from ledgerbook.domain.errors import ValidationError

E = TypeVar("E", bound=Enum)


def to_decimal(value: Any, field: str) -> Decimal:
    """Coerce an int, float, string or Decimal to a finite Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field=field)
    return result


def require_positive(value: Any, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero", field=field)
    return amount


def require_non_negative(value: Any, field: str) -> Decimal:
    amount = to_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative", field=field)
    return amount


def require_cents(value: Decimal, field: str) -> Decimal:
    """Reject a monetary value with more than two decimal places."""
    try:
        exact = money(value) == value
    except InvalidOperation:
        exact = False
    if not exact:
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)
    return value


def require_grams(value: Decimal, field: str) -> Decimal:
    """Reject a weight with more than three decimal places."""
    try:
        exact = kilograms(value) == value
    except InvalidOperation:
        exact = False
    if not exact:
        raise ValidationError(f"{field} must have at most 3 decimal places", field=field)
    return value


def require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value


def require_choice(enum_cls: type[E], value: Any, field: str) -> E:
    """Coerce a value to a member of an enumeration."""
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {choices}", field=field)


def require_date(value: Any, field: str = "date") -> date:
    # datetime is a date subclass but carries a time component
    if not isinstance(value, date) or isinstance(value, datetime):
        raise ValidationError(f"{field} must be a date", field=field)
    return value


def validate_cash_transaction(txn: CashTransaction) -> None:
    require_date(txn.date)
    require_cents(require_positive(txn.amount, "amount"), "amount")
    require_text(txn.category, "category")
    if not isinstance(txn.description, str):
        raise ValidationError("description must be text", field="description")


def validate_bank_transaction(txn: BankTransaction) -> None:
    require_date(txn.date)
    require_cents(require_positive(txn.amount, "amount"), "amount")
    require_text(txn.category, "category")
    if not isinstance(txn.description, str):
        raise ValidationError("description must be text", field="description")
    if not isinstance(txn.bank_account_id, int):
        raise ValidationError("bank_account_id is required", field="bank_account_id")


def validate_stock_transaction(txn: StockTransaction) -> None:
    require_date(txn.date)
    require_text(txn.item_name, "item_name")
    require_grams(require_positive(txn.weight, "weight"), "weight")
    require_cents(require_positive(txn.price_per_kg, "price_per_kg"), "price_per_kg")
    if txn.payment_method == PaymentMethod.BANK and txn.bank_account_id is None:
        raise ValidationError(
            "bank_account_id is required when paying by bank", field="bank_account_id"
        )
    if txn.payment_method == PaymentMethod.CASH and txn.bank_account_id is not None:
        raise ValidationError(
            "bank_account_id must be empty when paying by cash", field="bank_account_id"
        )


def validate_opening_balance(opening: OpeningBalance) -> None:
    require_cents(require_non_negative(opening.amount, "amount"), "amount")
    if opening.pool == PaymentMethod.BANK and opening.bank_account_id is None:
        raise ValidationError("bank_account_id is required for a bank opening balance", field="bank_account_id")
    if opening.pool == PaymentMethod.CASH and opening.bank_account_id is not None:
        raise ValidationError("bank_account_id must be empty for the cash opening balance", field="bank_account_id")


def validate_initial_stock_item(item: InitialStockItem) -> None:
    require_text(item.item_name, "item_name")
    require_grams(require_positive(item.weight, "weight"), "weight")
    require_cents(require_positive(item.price_per_kg, "price_per_kg"), "price_per_kg")
