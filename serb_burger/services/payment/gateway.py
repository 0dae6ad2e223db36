"""
Payment Gateway Adapter

Single entry point used by checkout: ``process(amount, method)``.

    cash  accepted locally up to CASH_PAYMENT_LIMIT, no provider involved
    card  delegated to the configured provider (WATA or mock)
"""

import logging
import time

from serb_burger.models import PaymentMethod
from serb_burger.services.payment.base import BasePaymentService, PaymentResult

logger = logging.getLogger(__name__)


class PaymentGateway:
    def __init__(self, provider: BasePaymentService, cash_limit: float = 500.0,
                 currency: str = "RUB"):
        self.provider = provider
        self.cash_limit = cash_limit
        self.currency = currency

    async def process(self, amount: float, method: PaymentMethod) -> PaymentResult:
        if method == PaymentMethod.CASH:
            return self._cash(amount)

        result = await self.provider.create_payment(amount, currency=self.currency)
        if not result.success:
            logger.warning(
                f"Card payment failed via {self.provider.provider_name}: "
                f"{result.error_code} - {result.error_message}"
            )
        return result

    def _cash(self, amount: float) -> PaymentResult:
        if amount > self.cash_limit:
            logger.info(f"Cash payment refused for {amount:.2f} (limit {self.cash_limit:g})")
            return PaymentResult(
                success=False,
                amount=amount,
                currency=self.currency,
                error_message=f"Оплата наличными: недоступно для заказов > {self.cash_limit:g} ₽",
                error_code="cash_limit_exceeded",
            )
        return PaymentResult(
            success=True,
            transaction_id=f"cash-{int(time.time() * 1000)}",
            amount=amount,
            currency=self.currency,
        )
