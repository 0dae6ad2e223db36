"""
Admin endpoints: session cookie, live order queue and QR scan completion.

The dashboard polls ``GET /admin/orders`` every
ORDER_POLL_INTERVAL_SECONDS; the interval is advertised in the
``X-Poll-Interval`` response header.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.api.deps import require_admin
from serb_burger.core.config import get_settings
from serb_burger.core.errors import AdminAuthRequired
from serb_burger.database import get_db
from serb_burger.schemas import (
    AdminOrderOut,
    ErrorResponse,
    LoginRequest,
    OrderStatusUpdate,
    ScanRequest,
)
from serb_burger.services import auth, orders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], responses={401: {"model": ErrorResponse}})


# =============================================================================
# SESSION
# =============================================================================

@router.post("/login", summary="Admin Login")
async def login(credentials: LoginRequest, response: Response) -> dict[str, bool]:
    settings = get_settings()

    if not auth.password_matches(credentials.password, settings.admin_password):
        logger.warning("Admin login failed: wrong password")
        raise AdminAuthRequired("Неверный пароль")

    response.set_cookie(
        key=settings.admin_cookie_name,
        value=auth.issue_token(settings.admin_password),
        max_age=settings.admin_session_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )
    logger.info("Admin logged in")
    return {"success": True}


@router.delete("/login", summary="Admin Logout")
async def logout(response: Response) -> dict[str, bool]:
    response.delete_cookie(get_settings().admin_cookie_name, path="/")
    return {"success": True}


# =============================================================================
# ORDER QUEUE
# =============================================================================

@router.get(
    "/orders",
    response_model=list[AdminOrderOut],
    dependencies=[Depends(require_admin)],
    summary="Active Orders",
)
async def list_orders(response: Response, db: AsyncSession = Depends(get_db)) -> list[AdminOrderOut]:
    """Orders that are not completed yet, newest first."""
    response.headers["X-Poll-Interval"] = str(get_settings().order_poll_interval_seconds)
    return [orders.admin_order_out(order) for order in await orders.list_active_orders(db)]


@router.patch(
    "/orders",
    response_model=AdminOrderOut,
    dependencies=[Depends(require_admin)],
    responses={404: {"model": ErrorResponse}},
    summary="Update Order Status",
)
async def update_order(data: OrderStatusUpdate, db: AsyncSession = Depends(get_db)) -> AdminOrderOut:
    order = await orders.update_status(db, data.order_id, data.status)
    return orders.admin_order_out(order)


@router.post(
    "/orders/scan",
    response_model=AdminOrderOut,
    dependencies=[Depends(require_admin)],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Complete Order by QR Code",
)
async def scan_order(data: ScanRequest, db: AsyncSession = Depends(get_db)) -> AdminOrderOut:
    """Mark the order encoded in a scanned ``ORDER:<number>`` code as completed."""
    order = await orders.complete_scanned(db, data.code)
    return orders.admin_order_out(order)
