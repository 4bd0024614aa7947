from decimal import Decimal
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from restaurant_backend.schemas import LineItem
from restaurant_backend.services.pricing import (
    compute_total,
    price_order,
    round_money,
    to_minor_units,
)


def items(*pairs):
    return [LineItem(name=f"item {i}", price=price, qty=qty) for i, (price, qty) in enumerate(pairs)]


def coupon(percent):
    return SimpleNamespace(discount_percent=Decimal(str(percent)))


def test_total_is_sum_of_price_times_quantity():
    assert compute_total(items((10, 2), (5, 3))) == Decimal("35.00")


def test_coupon_discount_is_applied():
    assert compute_total(items((10, 2), (5, 3)), coupon(20)) == Decimal("28.00")


def test_no_coupon_leaves_total_untouched():
    assert compute_total(items((10, 2), (5, 3)), None) == Decimal("35.00")


def test_breakdown_rounds_half_up():
    totals = price_order(items(("9.99", 3)), coupon(15))

    assert totals.subtotal == Decimal("29.97")
    assert totals.discount == Decimal("4.50")
    assert totals.total == Decimal("25.47")


def test_full_discount_is_free():
    assert compute_total(items((12.5, 1)), coupon(100)) == Decimal("0.00")


def test_float_prices_do_not_drift():
    assert compute_total(items((0.1, 1), (0.2, 1))) == Decimal("0.30")


def test_quantity_defaults_to_one():
    assert LineItem(name="Cola", price=2).qty == 1
    assert LineItem.model_validate({"name": "Cola", "price": 2, "quantity": None}).qty == 1
    assert LineItem.model_validate({"name": "Cola", "price": 2, "quantity": 4}).qty == 4


@pytest.mark.parametrize("qty", [0, -1, "two", 1.5])
def test_invalid_quantity_is_rejected(qty):
    with pytest.raises(ValidationError):
        LineItem.model_validate({"name": "Cola", "price": 2, "qty": qty})


def test_negative_price_is_rejected():
    with pytest.raises(ValidationError):
        LineItem(name="Cola", price=-1)


@pytest.mark.parametrize(
    "amount, cents",
    [(29.99, 2999), (10, 1000), ("0.005", 1), (Decimal("4.445"), 445), (0, 0)],
)
def test_minor_units(amount, cents):
    assert to_minor_units(amount) == cents


def test_round_money():
    assert round_money("2.675") == Decimal("2.68")
    assert round_money(None) == Decimal("0.00")
