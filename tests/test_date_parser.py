"""Tests for value date parsing."""

import pytest
from datetime import date, timedelta
from withdrawals.utils.date_parser import parse_date

TODAY = date(2024, 3, 1)  # a Friday


def test_parse_iso_date():
    """Test parsing ISO dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_day_first():
    """Bank formats put the day first."""
    assert parse_date("05/04/2024") == date(2024, 4, 5)


def test_parse_month_name():
    assert parse_date("March 15, 2024") == date(2024, 3, 15)


def test_parse_today():
    """Test parsing 'today'."""
    assert parse_date("today") == date.today()


@pytest.mark.parametrize(
    "text,expected",
    [
        ("today", TODAY),
        ("yesterday", TODAY - timedelta(days=1)),
        ("tomorrow", TODAY + timedelta(days=1)),
        ("next week", date(2024, 3, 4)),
        ("next month", date(2024, 4, 1)),
        ("in 3 days", date(2024, 3, 4)),
        ("in 1 day", date(2024, 3, 2)),
        ("in 2 weeks", date(2024, 3, 15)),
        ("in 1 month", date(2024, 4, 1)),
        ("  Tomorrow ", TODAY + timedelta(days=1)),
    ],
)
def test_relative_dates(text, expected):
    assert parse_date(text, today=TODAY) == expected


def test_invalid_date():
    """Test that invalid dates raise ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date at all")
