# app/domain/pricing.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    #float przez str, inaczej Decimal(0.1) ciagnie smieci binarne
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_subtotal(price, quantity: int) -> Decimal:
    return to_money(to_money(price) * quantity)


def cart_total(subtotals: Iterable[Decimal]) -> Decimal:
    # zawsze od zera z aktualnych pozycji, nigdy inkrementalnie
    return to_money(sum((to_money(s) for s in subtotals), ZERO))
