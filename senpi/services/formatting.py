"""Number formatting for chat replies (en-US grouping)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Union

from .tokens import UNIT_PRECISION, to_decimal

Numeric = Union[int, float, str, Decimal]


def _format_grouped(value: Numeric, min_fraction: int, max_fraction: int) -> str:
    amount = to_decimal(value)
    quantum = Decimal(1).scaleb(-max_fraction)
    with localcontext() as ctx:
        ctx.prec = UNIT_PRECISION
        rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)

    text = f"{rounded:,f}"
    if "." not in text:
        return text + ("." + "0" * min_fraction if min_fraction else "")

    whole, fraction = text.split(".")
    fraction = fraction.rstrip("0")
    if len(fraction) < min_fraction:
        fraction = fraction.ljust(min_fraction, "0")
    return f"{whole}.{fraction}" if fraction else whole


def format_number(value: Numeric, max_fraction: int = 3) -> str:
    """``1234.5678`` -> ``"1,234.568"``; integers keep no fraction."""

    return _format_grouped(value, 0, max_fraction)


def format_pnl(pnl: Numeric, max_fraction: int = 2) -> str:
    """Signed dollar PnL, e.g. ``+$1,234.5`` or ``-$12``."""

    amount = to_decimal(pnl)
    sign = "+" if amount >= 0 else "-"
    return f"{sign}${_format_grouped(abs(amount), 0, max_fraction)}"


def format_amount(value: Numeric) -> str:
    """Order amounts and prices: at least two and at most twenty decimals."""

    return _format_grouped(value, 2, 20)


def number_to_string(value: Numeric) -> str:
    """Plain decimal string without exponent or trailing zeros (``10``, ``0.5``)."""

    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


__all__ = ["format_number", "format_pnl", "format_amount", "number_to_string"]
