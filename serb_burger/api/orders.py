"""
Storefront order endpoints: placement, status tracking and the QR image
shown on the confirmation page.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api.deps import IdPath
from serb_burger.database import get_db
from serb_burger.schemas import (
    ErrorResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderStatusResponse,
)
from serb_burger.services import orders, qr

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.post("", response_model=OrderCreateResponse, summary="Place Order")
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderCreateResponse:
    """
    Store an order whose payment already went through.

    Line prices and the total are recomputed from the catalog; a client
    total that disagrees is rejected with 400.
    """
    logger.info(f"Placing order: {len(order_data.items)} lines, {order_data.payment_method.value}")
    order = await orders.create_order(db, order_data)
    return OrderCreateResponse(
        order_id=order.number,
        order_number=order.number,
        total_amount=order.total_amount,
        qr_payload=qr.encode_order(order.number),
    )


@router.get("/{number}", response_model=OrderStatusResponse, summary="Order Status")
async def get_order_status(number: IdPath, db: AsyncSession = Depends(get_db)) -> OrderStatusResponse:
    return OrderStatusResponse.model_validate(await orders.get_order_by_number(db, number))


@router.get(
    "/{number}/qr",
    response_class=Response,
    responses={200: {"content": {"image/svg+xml": {}}}},
    summary="Order QR Code",
)
async def get_order_qr(number: IdPath, db: AsyncSession = Depends(get_db)) -> Response:
    """SVG QR code encoding ``ORDER:<number>``."""
    order = await orders.get_order_by_number(db, number)
    return Response(content=qr.render_svg(order.number), media_type="image/svg+xml")
