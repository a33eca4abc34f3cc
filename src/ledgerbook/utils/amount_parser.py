"""Amount and weight parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def _parse_number(text: str, what: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse {what} '{text}'")
    if not value.is_finite():
        raise ValueError(f"Could not parse {what} '{text}'")
    return value


def parse_amount(amount_str: str) -> Decimal:
    """Parse a money amount such as "1,234.50" or "$12".

    Signs are not accepted: direction is given separately on every command.

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = re.sub(r"[$€£¥₹]", "", amount_str.strip()).replace(",", "").strip()
    if text.startswith(("-", "+")):
        raise ValueError(f"Amount must not carry a sign: '{amount_str}'")
    return _parse_number(text, "amount")


def parse_weight(weight_str: str) -> Decimal:
    """Parse a weight in kilograms, with an optional "kg" or "g" suffix."""
    if not weight_str or not weight_str.strip():
        raise ValueError("Empty weight string")

    text = weight_str.strip().lower().replace(" ", "")
    if text.endswith("kg"):
        return _parse_number(text[:-2], "weight")
    if text.endswith("g"):
        return _parse_number(text[:-1], "weight") / 1000
    return _parse_number(text, "weight")
