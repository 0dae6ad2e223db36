"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from serb_burger.core.config import get_settings, Settings, EnvironmentMode
from serb_burger.core.errors import (
    AppError,
    ValidationFailed,
    NotFound,
    Conflict,
    PaymentDeclined,
    AdminAuthRequired,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "AppError",
    "ValidationFailed",
    "NotFound",
    "Conflict",
    "PaymentDeclined",
    "AdminAuthRequired",
]
