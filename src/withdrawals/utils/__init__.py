"""Utility functions for the withdrawal workflow."""

from withdrawals.utils.date_parser import parse_date
from withdrawals.utils.amount_parser import parse_amount
from withdrawals.utils.user_resolver import resolve_user

__all__ = ["parse_date", "parse_amount", "resolve_user"]
