"""Tests for date and amount parsing."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from ledgerbook.utils.amount_parser import parse_amount, parse_weight
from ledgerbook.utils.date_parser import parse_date


def test_parse_absolute_date():
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_written_date():
    assert parse_date("15 January 2024") == date(2024, 1, 15)


def test_parse_relative_dates():
    today = date.today()
    assert parse_date("today") == today
    assert parse_date(" Yesterday ") == today - timedelta(days=1)
    assert parse_date("3 days ago") == today - timedelta(days=3)
    assert parse_date("start of month") == today.replace(day=1)


def test_parse_invalid_date():
    with pytest.raises(ValueError):
        parse_date("not a date")


@pytest.mark.parametrize(
    "text, expected",
    [("123.45", Decimal("123.45")), ("$1,234.50", Decimal("1234.50")), (" 7 ", Decimal("7"))],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "-5", "NaN"])
def test_parse_amount_rejects(text):
    with pytest.raises(ValueError):
        parse_amount(text)


@pytest.mark.parametrize(
    "text, expected",
    [("50", Decimal("50")), ("12.5kg", Decimal("12.5")), ("750g", Decimal("0.75")), ("2 kg", Decimal("2"))],
)
def test_parse_weight(text, expected):
    assert parse_weight(text) == expected
