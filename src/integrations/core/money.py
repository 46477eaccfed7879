"""Money conversion helpers for vendor boundaries.

Internally every amount is an integer in the currency's minor unit. Vendors
that want major units (Salesforce) or decimal strings (Printful) get them from
these helpers at the connector boundary, and vendor decimals coming back are
converted with Decimal so no float arithmetic touches the value.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")


def format_decimal_amount(minor_units: int) -> str:
    """Render a minor-unit integer as a two-place decimal string.

    >>> format_decimal_amount(2499)
    '24.99'
    """
    return str((Decimal(int(minor_units)) / 100).quantize(_CENT))


def to_major_units(minor_units: int) -> float:
    """Convert minor units to a major-unit number for JSON vendor payloads."""
    return float(Decimal(int(minor_units)) / 100)


def parse_minor_units(value: str | int | float | None) -> int:
    """Parse a major-unit decimal (as reported by a vendor) into minor units.

    Missing or unparseable values yield 0 so aggregate read models never carry
    a NaN forward.
    """
    if value is None or value == "":
        return 0
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return 0
    if not amount.is_finite():
        return 0
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
