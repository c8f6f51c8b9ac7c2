from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Normalize a price-like value to a 2-decimal Decimal.

    Floats go through str() so 2.5 becomes Decimal("2.50") rather than its
    binary expansion. Raises ValueError for anything non-numeric.
    """
    if isinstance(value, bool):
        raise ValueError("money value must be numeric")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"invalid money value: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"invalid money value: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return to_money(sum(values, ZERO))


def money_to_json(amount: Decimal) -> float:
    return float(amount)
