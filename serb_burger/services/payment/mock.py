"""
Mock Payment Service Implementation

Stands in for WATA when the API key or shop id is not configured:
    - Local development without merchant credentials
    - Test suite (no network)

Behavior:
    - Succeeds immediately by default, without a hosted checkout page
    - Optional simulated latency and decline rate for manual testing
    - Generates ``wata-mock-<ms>`` transaction ids
"""

import asyncio
import logging
import random
import time
from datetime import datetime
from typing import Optional

from serb_burger.services.payment.base import BasePaymentService, PaymentResult

logger = logging.getLogger(__name__)


class MockPaymentService(BasePaymentService):
    """
    Mock implementation of the card payment service.

    Attributes:
        failure_rate: Probability of simulated payment failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds
    """

    DECLINE_REASONS = [
        ("card_declined", "Карта отклонена"),
        ("insufficient_funds", "Недостаточно средств на карте"),
        ("processing_error", "Ошибка при обработке платежа"),
    ]

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        webhook_secret: Optional[str] = None,
    ):
        super().__init__(webhook_secret=webhook_secret)
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        logger.info(
            f"MockPaymentService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> float:
        """Sleep for a random latency; returns milliseconds."""
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def create_payment(
        self,
        amount: float,
        currency: str = "RUB",
        description: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> PaymentResult:
        """Simulate starting a card payment."""
        logger.debug(f"Mock: Processing payment of {amount:.2f} {currency.upper()}")

        if amount <= 0:
            return PaymentResult(
                success=False,
                error_message="Сумма платежа должна быть больше нуля",
                error_code="invalid_amount",
            )

        latency_ms = await self._simulate_latency()

        if self._should_fail():
            error_code, error_message = random.choice(self.DECLINE_REASONS)
            logger.debug(f"Mock: Payment declined - {error_code}")
            return PaymentResult(
                success=False,
                amount=amount,
                currency=currency,
                error_message=error_message,
                error_code=error_code,
                response_time_ms=latency_ms,
            )

        transaction_id = f"wata-mock-{int(time.time() * 1000)}"
        logger.info(f"Mock: Payment successful - {transaction_id} - {amount:.2f}")

        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            amount=amount,
            currency=currency,
            response_time_ms=latency_ms,
            metadata={
                "description": description,
                "mock": True,
                "created_at": datetime.now().isoformat(),
                **(metadata or {}),
            },
        )

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        return True
