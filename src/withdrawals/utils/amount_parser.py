"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a withdrawal amount string into a Decimal.

    Handles various formats:
    - "100000"
    - "100,000.50"
    - "$100,000"
    - "€ 2 500"
    - "AED 12,000"
    - "USD 5000"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Remove currency codes and symbols
    cleaned = re.sub(r"(?i)\b(usd|eur|aed)\b|[$€]", "", amount_str.strip())

    # Remove thousands separators and whitespace
    cleaned = re.sub(r"[,\s]", "", cleaned)

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
