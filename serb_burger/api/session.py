"""
Storefront session endpoints: the shopper's cart and tracked order, kept
under an opaque client-generated key. Public, like the menu.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from serb_burger.core.errors import ValidationFailed
from serb_burger.database import get_db
from serb_burger.schemas import (
    SESSION_KEY_PATTERN,
    CartItemAdd,
    ErrorResponse,
    MessageResponse,
    QuantityChange,
)
from serb_burger.services import cart
from serb_burger.services.cart import SessionRepository, StorefrontSession, get_session_repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/session",
    tags=["Session"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)

SessionKey = Annotated[str, Path(pattern=SESSION_KEY_PATTERN)]


@router.get("/{key}", response_model=StorefrontSession, summary="Load Session")
async def load_session(
    key: SessionKey,
    repository: SessionRepository = Depends(get_session_repository),
) -> StorefrontSession:
    """The stored document, or an empty session for a new key."""
    return repository.load(key)


@router.put("/{key}", response_model=StorefrontSession, summary="Replace Session")
async def replace_session(
    key: SessionKey,
    document: dict[str, Any] = Body(...),
    repository: SessionRepository = Depends(get_session_repository),
) -> StorefrontSession:
    """
    Store a whole client document. Legacy unversioned documents are
    migrated first.
    """
    try:
        session = cart.migrate_session(document)
    except ValueError as e:
        logger.info(f"Session document rejected for {key}: {e}")
        raise ValidationFailed("Некорректный документ сессии") from e

    repository.save(key, session)
    return session


@router.delete("/{key}", response_model=MessageResponse, summary="Forget Session")
async def delete_session(
    key: SessionKey,
    repository: SessionRepository = Depends(get_session_repository),
) -> MessageResponse:
    repository.delete(key)
    return MessageResponse(message="Сессия удалена")


# =============================================================================
# CART ITEMS
# =============================================================================

@router.post("/{key}/items", response_model=StorefrontSession, summary="Add to Cart")
async def add_item(
    key: SessionKey,
    data: CartItemAdd,
    db: AsyncSession = Depends(get_db),
    repository: SessionRepository = Depends(get_session_repository),
) -> StorefrontSession:
    """Price the product with its chosen ingredients and append it to the cart."""
    session = repository.load(key)
    await cart.add_product(db, session, data.product_id, data.selected_ingredients)
    repository.save(key, session)
    return session


@router.patch("/{key}/items/{item_id}", response_model=StorefrontSession, summary="Change Quantity")
async def change_quantity(
    key: SessionKey,
    item_id: str,
    data: QuantityChange,
    repository: SessionRepository = Depends(get_session_repository),
) -> StorefrontSession:
    session = repository.load(key)
    cart.require_item(session, item_id)
    session.update_quantity(item_id, data.delta)
    repository.save(key, session)
    return session


@router.delete("/{key}/items/{item_id}", response_model=StorefrontSession, summary="Remove from Cart")
async def remove_item(
    key: SessionKey,
    item_id: str,
    repository: SessionRepository = Depends(get_session_repository),
) -> StorefrontSession:
    session = repository.load(key)
    cart.require_item(session, item_id)
    session.remove_item(item_id)
    repository.save(key, session)
    return session
