"""Conversions between display amounts and smallest-unit integers.

All arithmetic in the exchange is on integers in the smallest unit (wei for
the native coin). These helpers exist for callers and reports; Decimal work
runs in a 78-digit context so any uint256 converts exactly.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

from cpamm.constants import NATIVE_DECIMALS

# 78 digits of precision, enough for uint256 values (up to ~10^77)
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def to_wei(value: int | str | Decimal, decimals: int = NATIVE_DECIMALS) -> int:
    """Scale a display amount to the smallest unit.

    ``to_wei("1.5")`` is ``1_500_000_000_000_000_000``. Floats are refused:
    pass a string to keep the digits exact.

    Raises:
        TypeError: If value is a float
        ValueError: If value has more fractional digits than decimals allows
    """
    if isinstance(value, float):
        raise TypeError("to_wei does not accept float; pass a str or Decimal")
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        try:
            scaled = Decimal(value).scaleb(decimals)
        except decimal.InvalidOperation as err:
            raise ValueError(f"Not a decimal amount: {value!r}") from err
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{value} has more than {decimals} decimal places")
        return int(scaled)


def from_wei(amount: int, decimals: int = NATIVE_DECIMALS) -> str:
    """Render a smallest-unit integer as a display string.

    Always keeps at least one fractional digit: ``from_wei(180 * 10**18)`` is
    ``"180.0"``, ``from_wei(1978021978021978021)`` is
    ``"1.978021978021978021"``.
    """
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "to_wei",
    "from_wei",
]
