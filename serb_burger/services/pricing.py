"""
Pricing Engine

Unit price of a customized product is its base price plus the price of
every selected ingredient. The same functions back the cart document, the
customizer preview and the server-side order recomputation, so the three
always agree.
"""

from typing import Iterable, Tuple


def money(amount: float) -> float:
    """Round to kopecks."""
    return round(float(amount), 2)


def unit_price(product_price: float, ingredient_prices: Iterable[float] = ()) -> float:
    """
    Price of one customized product.

    Example:
        >>> unit_price(350, [60])
        410.0
        >>> unit_price(350, [])
        350.0
    """
    return money(product_price + sum(ingredient_prices))


def line_total(unit: float, quantity: int) -> float:
    return money(unit * quantity)


def cart_total(lines: Iterable[Tuple[float, int]]) -> float:
    """Sum of ``unit × quantity`` over ``(unit, quantity)`` pairs."""
    return money(sum(line_total(unit, quantity) for unit, quantity in lines))


def same_amount(a: float, b: float) -> bool:
    """Compare two money amounts to the kopeck."""
    return abs(money(a) - money(b)) < 0.005
