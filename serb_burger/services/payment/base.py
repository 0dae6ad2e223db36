"""
Payment Service Abstract Base Class

Defines the interface contract for card payment providers.
Both MockPaymentService and WataPaymentService implement these methods,
so checkout behaves the same whichever provider is active.

Design Pattern: Strategy Pattern
    - Provider chosen at startup from configuration
    - Mock implementation keeps development and tests offline
"""

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    """
    Standardized result from payment processing.

    Attributes:
        success: Whether the payment was accepted
        transaction_id: Provider (or local) transaction identifier
        checkout_url: Hosted checkout page the shopper must visit, if any
        amount: Amount in roubles
        currency: Currency code (e.g., "RUB")
        error_message: Shopper-facing error description if payment failed
        error_code: Machine-readable error code
        response_time_ms: Time taken to process the payment
        metadata: Additional data from the payment provider
    """
    success: bool
    transaction_id: Optional[str] = None
    checkout_url: Optional[str] = None
    amount: Optional[float] = None
    currency: str = "RUB"
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0
    metadata: Optional[dict] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "transaction_id": self.transaction_id,
            "checkout_url": self.checkout_url,
            "amount": self.amount,
            "currency": self.currency,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "response_time_ms": self.response_time_ms,
            "metadata": self.metadata,
        }


def compute_signature(payload: bytes, secret: str) -> str:
    """HMAC-SHA256 hex digest of the raw webhook body."""
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def signature_matches(payload: bytes, signature: Optional[str], secret: str) -> bool:
    if not signature:
        return False
    expected = compute_signature(payload, secret).encode("utf-8")
    return hmac.compare_digest(expected, signature.strip().lower().encode("utf-8"))


class BasePaymentService(ABC):
    """
    Abstract base class for card payment services.

    Example:
        >>> service = get_payment_service()  # Mock or WATA
        >>> result = await service.create_payment(amount=410)
        >>> if result.success:
        ...     print(result.checkout_url)
    """

    def __init__(self, webhook_secret: Optional[str] = None):
        self._webhook_secret = webhook_secret

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "mock", "wata")
        """
        pass

    @abstractmethod
    async def create_payment(
        self,
        amount: float,
        currency: str = "RUB",
        description: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> PaymentResult:
        """
        Start a card payment.

        Args:
            amount: Amount in roubles
            currency: Three-letter currency code
            description: Description shown on the hosted checkout page
            metadata: Additional key-value data to attach

        Returns:
            PaymentResult: success with an optional checkout_url, or failure
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment service.

        Returns:
            bool: True if service is reachable and operational
        """
        pass

    def check_signature(self, payload: bytes, signature: Optional[str]) -> bool:
        """
        Verify the HMAC signature of a webhook body.

        When no webhook secret is configured every payload is accepted
        (development only).

        Args:
            payload: Raw request body bytes
            signature: Signature header from the request
        """
        if not self._webhook_secret:
            logger.warning(
                f"{self.provider_name}: Webhook secret not configured, skipping verification"
            )
            return True
        if not signature_matches(payload, signature, self._webhook_secret):
            logger.warning(f"{self.provider_name}: Webhook signature invalid")
            return False
        return True

    async def close(self) -> None:
        """Release network resources, if any."""
