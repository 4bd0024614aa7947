"""
Pricing Engine

Computes order totals from line items and an optional coupon.

Precision policy:
    All arithmetic uses Decimal. Subtotal, discount and total are rounded to
    two decimals with ROUND_HALF_UP, and the total never drops below zero.

Quantity policy:
    Line items always carry an integer quantity >= 1; an absent quantity is
    defaulted to 1 at the schema boundary (see schemas.LineItem), never here.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Protocol

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class PricedItem(Protocol):
    price: Decimal
    qty: int


class Discount(Protocol):
    discount_percent: Decimal


def to_decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value or "0"))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a currency amount to its smallest unit (29.99 -> 2999)."""
    return int((to_decimal(amount) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    total: Decimal


def subtotal_of(items: Iterable[PricedItem]) -> Decimal:
    return sum(
        (to_decimal(item.price) * item.qty for item in items),
        Decimal("0"),
    )


def price_order(
    items: Iterable[PricedItem],
    coupon: Optional[Discount] = None,
) -> PriceBreakdown:
    """
    Price an order.

    Args:
        items: Line items with ``price`` and ``qty``
        coupon: A coupon found in the store, or None. Unknown codes are
            resolved to None by the caller and simply not applied.

    Returns:
        PriceBreakdown: Rounded subtotal, discount and total
    """
    base = subtotal_of(items)

    discount = Decimal("0")
    if coupon is not None:
        discount = base * to_decimal(coupon.discount_percent) / HUNDRED

    total = max(base - discount, Decimal("0"))

    return PriceBreakdown(
        subtotal=round_money(base),
        discount=round_money(discount),
        total=round_money(total),
    )


def compute_total(
    items: Iterable[PricedItem],
    coupon: Optional[Discount] = None,
) -> Decimal:
    """Total amount of an order, coupon discount applied."""
    return price_order(items, coupon).total
