"""
Shared FastAPI dependencies.
"""

import logging
from typing import Annotated, Optional

from fastapi import Path, Request

from serb_burger.core.config import get_settings
from serb_burger.core.errors import AdminAuthRequired
from serb_burger.schemas import MAX_ID
from serb_burger.services import auth

logger = logging.getLogger(__name__)


def admin_token(request: Request) -> Optional[str]:
    return request.cookies.get(get_settings().admin_cookie_name)


async def require_admin(request: Request) -> None:
    """
    Guard for admin-only routes.

    Raises:
        AdminAuthRequired: cookie missing or not issued for the current
            admin password
    """
    settings = get_settings()
    if not auth.token_valid(admin_token(request), settings.admin_password):
        logger.info(f"Admin access denied: {request.method} {request.url.path}")
        raise AdminAuthRequired()


# Path ids map to 32-bit integer columns
IdPath = Annotated[int, Path(ge=1, le=MAX_ID)]
