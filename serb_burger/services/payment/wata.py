"""
WATA Pay Payment Service Implementation

Real card payments through the WATA Pay hosted checkout.
Used whenever WATA_API_KEY and WATA_SHOP_ID are both configured.

Flow:
    1. POST <WATA_API_URL>/payments with the order amount
    2. WATA answers with a hosted ``checkout_url``
    3. The shopper pays on WATA's page and is sent back to ``return_url``
    4. WATA reports the final status to ``notification_url`` (webhook)

Security Notes:
    - The API key travels only in the Authorization header, never in logs
    - Webhook bodies are HMAC-signed with WATA_WEBHOOK_SECRET
"""

import logging
import time
from typing import Optional

import httpx

from serb_burger.core.config import get_settings
from serb_burger.services.payment.base import BasePaymentService, PaymentResult

logger = logging.getLogger(__name__)


PAYMENT_DESCRIPTION = "Заказ в Serb Burger"
ERROR_NOT_INITIATED = "Не удалось инициировать платеж через WATA"
ERROR_GATEWAY = "Ошибка при обращении к платежному шлюзу"


class WataPaymentService(BasePaymentService):
    """
    WATA Pay payment service.

    Args:
        client: Optional pre-built ``httpx.AsyncClient`` (tests inject one
            backed by ``httpx.MockTransport``)

    Example:
        >>> service = WataPaymentService()
        >>> result = await service.create_payment(amount=410)
        >>> result.checkout_url
        'https://pay.watapay.io/...'
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        settings = get_settings()

        if not settings.wata_configured:
            raise ValueError(
                "WATA_API_KEY and WATA_SHOP_ID are required for WATA payments. "
                "Set them in your .env file or environment variables."
            )

        super().__init__(webhook_secret=settings.wata_webhook_secret)
        self.shop_id = settings.wata_shop_id
        self.public_base_url = settings.public_base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=settings.wata_api_url,
            timeout=settings.wata_timeout_seconds,
        )
        self._headers = {
            "Authorization": f"Bearer {settings.wata_api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"WataPaymentService initialized (shop={self.shop_id})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "wata"

    async def create_payment(
        self,
        amount: float,
        currency: str = "RUB",
        description: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> PaymentResult:
        """
        Create a hosted checkout session.

        Provider and network errors are returned as a failed result,
        never raised.
        """
        start_time = time.time()
        body = {
            "shop_id": self.shop_id,
            "amount": amount,
            "currency": currency,
            "description": description or PAYMENT_DESCRIPTION,
            "return_url": f"{self.public_base_url}/order/success",
            "notification_url": f"{self.public_base_url}/api/webhooks/wata",
        }
        if metadata:
            body["metadata"] = metadata

        try:
            response = await self._client.post("/payments", json=body, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"WATA: Payment request rejected - {e.response.status_code} {e.response.text}"
            )
            return self._failure(amount, currency, ERROR_GATEWAY, "provider_error", start_time)
        except httpx.HTTPError as e:
            logger.error(f"WATA: Connection error - {e}")
            return self._failure(amount, currency, ERROR_GATEWAY, "connection_error", start_time)
        except ValueError:
            logger.error("WATA: Response is not valid JSON")
            return self._failure(amount, currency, ERROR_GATEWAY, "invalid_response", start_time)

        response_time = (time.time() - start_time) * 1000

        checkout_url = data.get("checkout_url") if isinstance(data, dict) else None
        if not checkout_url:
            logger.warning(f"WATA: No checkout_url in response: {data}")
            return self._failure(amount, currency, ERROR_NOT_INITIATED, "no_checkout_url", start_time)

        transaction_id = str(data["id"]) if data.get("id") is not None else None
        logger.info(f"WATA: Payment created - {transaction_id} - {amount:.2f} {currency}")

        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            checkout_url=checkout_url,
            amount=amount,
            currency=currency,
            response_time_ms=response_time,
            metadata={"status": data.get("status")},
        )

    @staticmethod
    def _failure(amount: float, currency: str, message: str, code: str,
                 start_time: float) -> PaymentResult:
        return PaymentResult(
            success=False,
            amount=amount,
            currency=currency,
            error_message=message,
            error_code=code,
            response_time_ms=(time.time() - start_time) * 1000,
        )

    async def health_check(self) -> bool:
        """The API base URL answers at all (any status below 500)."""
        try:
            response = await self._client.get("/", headers=self._headers)
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"WATA health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
