from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENTS = Decimal("0.01")


class Trend(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class ChangeDisplay:
    text: str
    trend: Trend


def _round_cents(value: float) -> Decimal:
    # Exact binary value, ties away from zero: 0.125 -> 0.13, 1.005 -> 1.00
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(value: float) -> str:
    """USD with grouping and two decimals, e.g. 1234.5 -> "$1,234.50"."""
    cents = _round_cents(value)
    if value < 0:
        return f"-${-cents:,.2f}"
    return f"${cents:,.2f}"


def format_change(value: float) -> ChangeDisplay:
    """Signed two-decimal change; zero counts as positive."""
    if value == 0:
        value = 0.0  # -0.0 would otherwise print as "+-0.00"
    cents = _round_cents(value)
    if value >= 0:
        return ChangeDisplay(text=f"+{cents:.2f}", trend=Trend.POSITIVE)
    return ChangeDisplay(text=f"{cents:.2f}", trend=Trend.NEGATIVE)


def format_symbol(symbol: str) -> str:
    return symbol.upper()
