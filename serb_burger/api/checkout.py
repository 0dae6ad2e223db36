import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.core.errors import ValidationFailed
from serb_burger.database import get_db
from serb_burger.schemas import CheckoutRequest, CheckoutResponse, ErrorResponse, OrderItemIn
from serb_burger.services import orders, qr
from serb_burger.services.cart import SessionRepository, get_session_repository
from serb_burger.services.payment import PaymentGateway, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Checkout"], responses={400: {"model": ErrorResponse}})

EMPTY_CART = "Корзина пуста"


@router.post("/checkout", response_model=CheckoutResponse, summary="Checkout")
async def checkout(
    data: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    repository: SessionRepository = Depends(get_session_repository),
) -> CheckoutResponse:
    """
    Price the cart, take payment and create the order.

    Card payments through WATA answer with the hosted ``checkoutUrl`` to
    redirect to; otherwise the client goes straight to ``/order/<number>``.
    A refused payment returns 400 and creates nothing.

    With ``sessionKey`` and no ``items`` the stored cart is checked out. On
    success that cart is emptied and the order becomes its active order.
    """
    session = repository.load(data.session_key) if data.session_key else None

    if data.items is None:
        items = [OrderItemIn.model_validate(line) for line in session.to_order_items()]
        if not items:
            raise ValidationFailed(EMPTY_CART)
        data = data.model_copy(update={"items": items})

    order, payment = await orders.checkout(db, data, gateway)
    logger.info(f"Checkout complete: order #{order.number} ({payment.transaction_id})")

    if session is not None:
        session.clear()
        session.set_active_order(str(order.id), order.number)
        repository.save(data.session_key, session)

    return CheckoutResponse(
        order_number=order.number,
        total_amount=order.total_amount,
        transaction_id=payment.transaction_id,
        checkout_url=payment.checkout_url,
        redirect_url=payment.checkout_url or f"/order/{order.number}",
        qr_payload=qr.encode_order(order.number),
    )
