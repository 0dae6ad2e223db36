"""
Application error taxonomy.

Every error a request handler may raise on purpose derives from AppError.
The exception handlers registered in ``serb_burger.main`` turn them into
the standard error body::

    {"success": false, "error": "<message>", "detail": <details or null>}
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors with a known HTTP mapping."""

    status_code: int = 400

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationFailed(AppError):
    """Missing or malformed input."""
    status_code = 400


class NotFound(AppError):
    """Unknown id."""
    status_code = 404


class Conflict(AppError):
    """
    Duplicate slug, duplicate product-ingredient link, or delete blocked
    by dependents. Reported as 400 like other client errors.
    """
    status_code = 400


class PaymentDeclined(AppError):
    """The payment gateway refused or failed the charge."""
    status_code = 400


class AdminAuthRequired(AppError):
    """No valid admin session cookie on the request."""
    status_code = 401

    def __init__(self, message: str = "Требуется авторизация администратора"):
        super().__init__(message)
