"""
Numeric parsing for valuation-report captures.

Handles the formats OCR produces in valuation reports:
- Thousands separators: 12,053.00 -> 12053.00
- Currency symbols: $ 9,251.08 -> 9251.08
- OCR-split decimals: 9,251 .08 -> 9251.08
- Mileage: 82,114 -> 82114

Anything left over after stripping separators and symbols makes the
capture malformed, and the caller treats it as a non-match.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional
import re

# Trailing punctuation that commonly follows a value in running text
_TRAILING_PUNCT = '.,;:)'

_MONEY_BODY = re.compile(r'^\d+(?:\.\d{1,2})?$')
_INTEGER_BODY = re.compile(r'^\d+$')


def _strip_capture(raw: str) -> str:
    cleaned = raw.strip()
    cleaned = cleaned.lstrip('$').strip()
    cleaned = cleaned.rstrip(_TRAILING_PUNCT)
    # OCR inserts spaces inside numbers ("9,251 .08")
    cleaned = re.sub(r'\s+', '', cleaned)
    return cleaned.replace(',', '')


def parse_money(amount_str: str) -> Optional[Decimal]:
    """
    Parse a currency capture into a Decimal.

    Args:
        amount_str: Captured text (e.g., "$12,053.00", "9,251 .08")

    Returns:
        Decimal amount or None if the capture is malformed

    Examples:
        >>> parse_money("12,053.00")
        Decimal('12053.00')
        >>> parse_money("12,053.00abc") is None
        True
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = _strip_capture(amount_str)
    if not _MONEY_BODY.match(cleaned):
        return None

    try:
        return Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None


def parse_mileage(mileage_str: str) -> Optional[int]:
    """
    Parse an odometer capture into an integer.

    Examples:
        >>> parse_mileage("82,114")
        82114
        >>> parse_mileage("82,114mi") is None
        True
    """
    if not mileage_str or not isinstance(mileage_str, str):
        return None

    cleaned = _strip_capture(mileage_str)
    if not _INTEGER_BODY.match(cleaned):
        return None

    return int(cleaned)


def repair_implied_decimal(digits: str) -> Optional[tuple[Decimal, str]]:
    """
    Repair an amount whose decimal point was lost by OCR.

    Mitchell reports print "Market Value = $9,782.21"; OCR sometimes
    yields "978221", or "35285267" when the "$" glyph is read as a digit.

    Returns:
        (amount, correction_id) or None when the digits don't look like
        a dropped-decimal amount
    """
    cleaned = _strip_capture(digits)
    if not re.match(r'^\d{6,}$', cleaned):
        return None

    # 7+ digits starting with 3-5: leading digit is a misread "$"
    if re.match(r'^[3-5]\d{6,}$', cleaned):
        return Decimal(cleaned[1:-2] + '.' + cleaned[-2:]), 'numeric.dollar_glyph'

    return Decimal(cleaned[:-2] + '.' + cleaned[-2:]), 'numeric.implied_decimal'

