"""Rupiah amount parsing and formatting."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

_NUMBER = re.compile(r"(?:saldo\s*)?(?:rp\.?\s*)?(-?\d[\d.,]*)", re.IGNORECASE)
# "15000.00" style values use the dot as a decimal point
_DECIMAL_POINT = re.compile(r"^-?\d+\.\d{1,2}$")


def parse_rupiah(value: Any, dot_decimals: bool = True) -> Decimal | None:
    """Parse an Indonesian-formatted amount.

    Dots are thousands separators and a comma is the decimal point, so
    "Saldo Rp 1.234.567,50" parses to Decimal("1234567.50"). Numbers are
    passed through. Returns None when nothing numeric is found.

    JSON fields may carry "15000.00"; with dot_decimals a single dot followed
    by one or two digits is read as a decimal point. The plain-text H2H
    balance reply always uses dots as thousands separators, so its parser
    passes dot_decimals=False.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))

    match = _NUMBER.search(str(value))
    if not match:
        return None

    digits = match.group(1)
    if not (dot_decimals and _DECIMAL_POINT.match(digits)):
        digits = digits.replace(".", "").replace(",", ".")
    try:
        return Decimal(digits)
    except InvalidOperation:
        return None


def format_rupiah(amount: Decimal | int | float) -> str:
    """Format an amount the way Indonesian receipts do, e.g. "Rp 15.000"."""
    return f"Rp {int(amount):,}".replace(",", ".")
