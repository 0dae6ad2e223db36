"""
WATA Pay webhook endpoint.

WATA posts payment status changes here (``notification_url``). When
WATA_WEBHOOK_SECRET is configured the raw body must carry a valid
HMAC-SHA256 hex signature in the ``X-Signature`` header.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from pydantic import ValidationError

from serb_burger.core.errors import AppError, ValidationFailed
from serb_burger.schemas import ErrorResponse, WataWebhookPayload
from serb_burger.services.payment import BasePaymentService, get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


class InvalidSignature(AppError):
    status_code = 403


@router.post(
    "/wata",
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="WATA Payment Notification",
)
async def wata_webhook(
    request: Request,
    x_signature: Optional[str] = Header(None, alias="X-Signature"),
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> dict[str, bool]:
    body = await request.body()

    if not payment_service.check_signature(body, x_signature):
        raise InvalidSignature("Invalid signature")

    try:
        payload = WataWebhookPayload.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"WATA webhook rejected: {e.error_count()} validation errors")
        raise ValidationFailed("Invalid payload") from e

    logger.info(
        f"WATA webhook received: order {payload.order_id}, status {payload.status}, "
        f"transaction {payload.transaction_id}"
    )
    if payload.status == "success":
        logger.info(f"Order {payload.order_id} marked as paid")

    return {"received": True}
