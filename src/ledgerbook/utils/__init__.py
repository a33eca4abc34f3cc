"""Utility functions for ledgerbook."""

from ledgerbook.utils.date_parser import parse_date
from ledgerbook.utils.amount_parser import parse_amount, parse_weight
from ledgerbook.utils.account_resolver import resolve_bank_account

__all__ = ["parse_date", "parse_amount", "parse_weight", "resolve_bank_account"]
