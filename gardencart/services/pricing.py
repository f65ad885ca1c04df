"""Checkout money arithmetic, shared by the client wizard and the stub backend."""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Union

from gardencart.config import settings

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value (0.1 -> 0.1, not 0.1000000000000000055...)
    return Decimal(str(value))


@dataclass(frozen=True)
class CheckoutTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal
    grand_total: Decimal


def compute_subtotal(lines: Iterable) -> Decimal:
    """`lines` yields (unit_price, quantity) pairs."""
    return sum((to_decimal(price) * qty for price, qty in lines), Decimal("0"))


def compute_shipping(subtotal: Number) -> Decimal:
    if to_decimal(subtotal) >= settings.FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return settings.SHIPPING_FLAT_FEE


def compute_tax(subtotal: Number) -> Decimal:
    return (to_decimal(subtotal) * settings.TAX_RATE).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(subtotal: Number, discount: Number = 0) -> CheckoutTotals:
    subtotal = to_decimal(subtotal)
    discount = to_decimal(discount)
    shipping = compute_shipping(subtotal)
    tax = compute_tax(subtotal)
    return CheckoutTotals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        discount=discount,
        grand_total=subtotal + shipping + tax - discount,
    )


def format_currency(amount: Number) -> str:
    """BDT with no fraction digits, e.g. 1050.4 -> '৳1,050'."""
    whole = to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if whole < 0 else ""
    return f"{sign}{settings.CURRENCY_SYMBOL}{abs(whole):,}"
