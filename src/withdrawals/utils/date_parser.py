"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_RELATIVE_OFFSET = re.compile(r"^in (\d+) (day|days|week|weeks|month|months)$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a value date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", "15/01/2024", etc.
    - Relative dates: "today", "tomorrow", "next week", "next month",
      "in 3 days", "in 2 weeks", "in 1 month"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next week": today + timedelta(days=(7 - today.weekday())),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    match = _RELATIVE_OFFSET.match(date_str)
    if match:
        count = int(match.group(1))
        unit = match.group(2)
        if unit.startswith("day"):
            return today + timedelta(days=count)
        elif unit.startswith("week"):
            return today + timedelta(weeks=count)
        return today + relativedelta(months=count)

    # Try parsing as absolute date (day first for dd/mm/yyyy bank formats)
    try:
        dt = date_parser.parse(date_str, dayfirst=not re.match(r"^\d{4}-", date_str))
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
