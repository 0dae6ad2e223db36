"""
Payment Service Factory

Provides a single entry point for obtaining the payment service and the
checkout gateway built on top of it.

Usage:
    from serb_burger.services.payment import get_payment_gateway

    gateway = get_payment_gateway()
    result = await gateway.process(410, PaymentMethod.CARD)

Provider Switching:
    - WATA_API_KEY and WATA_SHOP_ID set → WataPaymentService
    - either missing → MockPaymentService (no API calls)
"""

import logging
from functools import lru_cache

from serb_burger.core.config import get_settings
from serb_burger.services.payment.base import (
    BasePaymentService,
    PaymentResult,
    compute_signature,
)
from serb_burger.services.payment.gateway import PaymentGateway
from serb_burger.services.payment.mock import MockPaymentService
from serb_burger.services.payment.wata import WataPaymentService

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_service() -> BasePaymentService:
    """
    Get the configured card payment service instance (cached).

    Example:
        >>> get_payment_service().provider_name
        'mock'  # WATA credentials not configured
    """
    settings = get_settings()

    if settings.wata_configured:
        logger.info(
            f"Payment Service: Using WataPaymentService ({settings.env_mode.value} mode)"
        )
        return WataPaymentService()

    if settings.use_real_services:
        logger.warning(
            "Payment Service: WATA API key or shop id missing in "
            f"{settings.env_mode.value} mode, card payments are mocked"
        )
    else:
        logger.warning("Payment Service: WATA API key or shop id missing, using MockPaymentService")
    return MockPaymentService(webhook_secret=settings.wata_webhook_secret)


@lru_cache()
def get_payment_gateway() -> PaymentGateway:
    settings = get_settings()
    return PaymentGateway(
        get_payment_service(),
        cash_limit=settings.cash_payment_limit,
        currency=settings.currency,
    )


def reset_payment_service() -> None:
    """
    Clear the cached payment service and gateway.

    Useful for testing or when configuration changes at runtime.
    """
    get_payment_gateway.cache_clear()
    get_payment_service.cache_clear()
    logger.debug("Payment service cache cleared")


__all__ = [
    "get_payment_service",
    "get_payment_gateway",
    "reset_payment_service",
    "compute_signature",
    "BasePaymentService",
    "PaymentGateway",
    "PaymentResult",
    "MockPaymentService",
    "WataPaymentService",
]
