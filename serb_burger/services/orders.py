"""
Order Service

Prices submitted carts against the canonical catalog, persists orders with
frozen ingredient snapshots and drives the status workflow::

    preparing → ready → completed

Client-supplied prices are never trusted: every line is recomputed from
the product and ingredient rows, selections are checked by the
``Customizer`` and a client total that disagrees is rejected.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.core.errors import NotFound, PaymentDeclined, ValidationFailed
from serb_burger.models import Order, OrderItem, OrderStatus, PaymentMethod, Product
from serb_burger.schemas import (
    AdminOrderItemOut,
    AdminOrderOut,
    CheckoutRequest,
    OrderCreate,
    OrderItemIn,
)
from serb_burger.services import qr
from serb_burger.services.customization import Customizer, IngredientOption
from serb_burger.services.payment import PaymentGateway, PaymentResult
from serb_burger.services.pricing import cart_total, line_total, same_amount, unit_price

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND = "Заказ не найден"
PRICE_MISMATCH = "Цены в корзине устарели, обновите корзину"
TOTAL_MISMATCH = "Сумма заказа не совпадает с ценами меню"
BELOW_MINIMUM = "Сумма заказа должна быть не меньше 1 ₽"

MIN_ORDER_AMOUNT = 1

# Attempts at allocating the next order number before giving up
NUMBER_ATTEMPTS = 3


@dataclass
class PricedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    options: list[IngredientOption]

    @property
    def total(self) -> float:
        return line_total(self.unit_price, self.quantity)

    def snapshot_json(self) -> str:
        return json.dumps([o.snapshot() for o in self.options], ensure_ascii=False)


# =============================================================================
# PRICING
# =============================================================================

async def price_items(db: AsyncSession, items: list[OrderItemIn]) -> tuple[list[PricedLine], float]:
    """
    Recompute every cart line from the catalog.

    Raises:
        ValidationFailed: unknown product, selection breaking the product's
            rules, or a client price that disagrees with the catalog
    """
    product_ids = sorted({item.product_id for item in items})
    result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
    products = {p.id: p for p in result.scalars().all()}

    lines = []
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            raise ValidationFailed("Продукт не найден", details={"productId": item.product_id})

        customizer = Customizer.for_product(product)
        options = customizer.check_selection(s.id for s in item.selected_ingredients)
        catalog_prices = {o.ingredient_id: o.price for o in options}

        for selected in item.selected_ingredients:
            if selected.price is not None and not same_amount(selected.price, catalog_prices[selected.id]):
                raise ValidationFailed(PRICE_MISMATCH, details={
                    "productId": product.id,
                    "ingredientId": selected.id,
                    "expected": catalog_prices[selected.id],
                    "received": selected.price,
                })

        line = PricedLine(
            product_id=product.id,
            product_name=product.name,
            quantity=item.quantity,
            unit_price=unit_price(product.price, (o.price for o in options)),
            options=options,
        )
        if item.total_price is not None and not same_amount(item.total_price, line.unit_price):
            raise ValidationFailed(PRICE_MISMATCH, details={
                "productId": product.id,
                "expected": line.unit_price,
                "received": item.total_price,
            })
        lines.append(line)

    return lines, cart_total((line.unit_price, line.quantity) for line in lines)


def _check_total(expected: float, received: Optional[float]) -> None:
    if expected < MIN_ORDER_AMOUNT:
        raise ValidationFailed(BELOW_MINIMUM, details={"expected": expected, "minimum": MIN_ORDER_AMOUNT})
    if received is not None and not same_amount(expected, received):
        raise ValidationFailed(TOTAL_MISMATCH, details={"expected": expected, "received": received})


# =============================================================================
# PERSISTENCE
# =============================================================================

async def _next_number(db: AsyncSession) -> int:
    current = await db.scalar(select(func.coalesce(func.max(Order.number), 0)))
    return int(current) + 1


async def _number_taken(db: AsyncSession, number: int) -> bool:
    return (await db.execute(select(Order.id).where(Order.number == number))).first() is not None


async def _load_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _persist_order(
    db: AsyncSession,
    lines: list[PricedLine],
    total: float,
    payment_method: PaymentMethod,
    transaction_id: Optional[str] = None,
) -> Order:
    """Insert the order and its items in one transaction."""
    for attempt in range(1, NUMBER_ATTEMPTS + 1):
        number = await _next_number(db)
        order = Order(
            number=number,
            total_amount=total,
            payment_method=payment_method,
            status=OrderStatus.PREPARING,
            transaction_id=transaction_id,
            items=[
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.unit_price,
                    selected_ingredients=line.snapshot_json(),
                )
                for line in lines
            ],
        )
        db.add(order)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            # Only a concurrent insert with the same number is retried
            if not await _number_taken(db, number):
                raise
            logger.warning(f"Order number collision (attempt {attempt}/{NUMBER_ATTEMPTS})")
            continue

        logger.info(
            f"Order #{order.number} created - {total:.2f} "
            f"({payment_method.value}, {len(lines)} lines)"
        )
        return await _load_order(db, order.id)

    raise RuntimeError("Could not allocate an order number")


async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
    """Place an order whose payment has already been settled."""
    lines, total = await price_items(db, data.items)
    _check_total(total, data.total_amount)
    return await _persist_order(db, lines, total, data.payment_method, data.transaction_id)


async def checkout(
    db: AsyncSession,
    data: CheckoutRequest,
    gateway: PaymentGateway,
) -> tuple[Order, PaymentResult]:
    """
    Price the cart, take payment, then create the order.

    Nothing is written when the payment fails.

    Raises:
        PaymentDeclined: the gateway refused the payment
    """
    lines, total = await price_items(db, data.items)
    _check_total(total, data.total_amount)

    result = await gateway.process(total, data.payment_method)
    if not result.success:
        raise PaymentDeclined(
            result.error_message or "Ошибка оплаты",
            details={"code": result.error_code},
        )

    order = await _persist_order(db, lines, total, data.payment_method, result.transaction_id)
    return order, result


# =============================================================================
# QUERIES & STATUS WORKFLOW
# =============================================================================

async def get_order_by_number(db: AsyncSession, number: int) -> Order:
    result = await db.execute(select(Order).where(Order.number == number))
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound(ORDER_NOT_FOUND, details={"number": number})
    return order


async def list_active_orders(db: AsyncSession) -> list[Order]:
    """Orders not yet completed, newest first."""
    result = await db.execute(
        select(Order)
        .where(Order.status != OrderStatus.COMPLETED)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())


async def update_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
    """Set any status; the last write wins."""
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFound(ORDER_NOT_FOUND, details={"orderId": order_id})

    previous = order.status
    order.status = status
    await db.commit()

    logger.info(f"Order #{order.number}: {previous.value} → {status.value}")
    return await _load_order(db, order_id)


async def complete_scanned(db: AsyncSession, code: str) -> Order:
    """Complete the order named by a scanned ``ORDER:<number>`` code."""
    number = qr.decode_order(code)
    order = await get_order_by_number(db, number)
    return await update_status(db, order.id, OrderStatus.COMPLETED)


def admin_order_out(order: Order) -> AdminOrderOut:
    return AdminOrderOut(
        id=order.id,
        number=order.number,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        status=order.status,
        created_at=order.created_at,
        items=[
            AdminOrderItemOut(
                product_id=item.product_id,
                product_name=item.product.name if item.product else "Товар",
                quantity=item.quantity,
                total_price=item.price,
                selected_ingredients=item.ingredients_snapshot,
            )
            for item in order.items
        ],
    )
