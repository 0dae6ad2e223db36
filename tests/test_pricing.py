"""
tests/test_pricing.py – unit price, line and cart totals.
"""
import pytest

from serb_burger.services.pricing import cart_total, line_total, money, same_amount, unit_price


class TestUnitPrice:
    def test_no_ingredients(self):
        assert unit_price(350) == 350
        assert unit_price(350, []) == 350

    def test_adds_every_ingredient(self):
        assert unit_price(350, [60]) == 410
        assert unit_price(350, [60, 40, 0]) == 450

    @pytest.mark.parametrize("base,extras,expected", [
        (120, [], 120),
        (0, [10.5, 0.25], 10.75),
        (199.99, [0.01], 200.0),
    ])
    def test_sum(self, base, extras, expected):
        assert unit_price(base, extras) == expected

    def test_accepts_generator(self):
        assert unit_price(100, (p for p in [10, 20])) == 130


class TestTotals:
    def test_line_total(self):
        assert line_total(410, 2) == 820

    def test_cart_total(self):
        assert cart_total([(410, 1), (120, 3)]) == 770

    def test_empty_cart(self):
        assert cart_total([]) == 0

    def test_rounds_to_kopecks(self):
        assert money(0.1 + 0.2) == 0.3
        assert cart_total([(0.1, 3)]) == 0.3


class TestSameAmount:
    def test_equal_after_rounding(self):
        assert same_amount(0.1 + 0.2, 0.3)

    def test_different(self):
        assert not same_amount(410, 409.99)
