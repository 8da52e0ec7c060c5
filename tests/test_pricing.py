import pytest
from decimal import Decimal
from smartbazaar.exceptions import InvalidInput
from smartbazaar.pricing import compute_pricing

def test_reference_order_pricing():
    p = compute_pricing(50, 20, 250, "0.02")
    assert p.subtotal == Decimal("1000")
    assert p.commission == Decimal("20")
    assert p.farmer_earning == Decimal("980")
    assert p.total_price == Decimal("1250")
    assert p.delivery_charge == Decimal("250")

def test_commission_rounds_half_up_to_whole_rupees():
    # 25 * 0.02 = 0.5 -> 1
    assert compute_pricing(25, 1, 250, "0.02").commission == Decimal("1")
    # 24 * 0.02 = 0.48 -> 0
    assert compute_pricing(24, 1, 250, "0.02").commission == Decimal("0")
    # 1275 * 0.02 = 25.5 -> 26
    assert compute_pricing("127.5", 10, 0, "0.02").commission == Decimal("26")

@pytest.mark.parametrize("price,qty", [
    ("49.99", "3"),
    ("120", "2.5"),
    ("1", "1"),
    ("3333.33", "7"),
    ("85", "0.125"),
])
def test_settlement_split_adds_up(price, qty):
    p = compute_pricing(price, qty, 250, "0.02")
    assert p.subtotal == Decimal(price) * Decimal(qty)
    assert p.farmer_earning + p.commission == p.subtotal
    assert p.total_price == p.subtotal + Decimal("250")
    assert p.commission == p.commission.to_integral_value()

def test_commission_is_not_charged_to_the_buyer():
    p = compute_pricing(100, 10, 250, "0.02")
    assert p.total_price - p.delivery_charge == p.subtotal

def test_rate_bounds_are_inclusive():
    assert compute_pricing(10, 10, 0, 0).commission == Decimal("0")
    full = compute_pricing(10, 10, 0, 1)
    assert full.commission == Decimal("100")
    assert full.farmer_earning == Decimal("0")

@pytest.mark.parametrize("args", [
    (0, 1, 250, "0.02"),
    (-5, 1, 250, "0.02"),
    (10, 0, 250, "0.02"),
    (10, -1, 250, "0.02"),
    (10, 1, -1, "0.02"),
    (10, 1, 250, "1.5"),
    (10, 1, 250, "-0.01"),
    ("abc", 1, 250, "0.02"),
    (10, None, 250, "0.02"),
    (10, "nan", 250, "0.02"),
    (True, 1, 250, "0.02"),
])
def test_invalid_input(args):
    with pytest.raises(InvalidInput):
        compute_pricing(*args)
