"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a transaction date.

    Supports absolute dates ("2024-01-15", "15 Jan 2024") and a few relative
    words: "today", "yesterday", "N days ago", and "start of month".

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "start of month":
        return today.replace(day=1)
    if text == "start of last month":
        return (today - relativedelta(months=1)).replace(day=1)

    words = text.split()
    if len(words) == 3 and words[1] in ("day", "days") and words[2] == "ago" and words[0].isdigit():
        return today - timedelta(days=int(words[0]))

    try:
        return date_parser.parse(text, yearfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
