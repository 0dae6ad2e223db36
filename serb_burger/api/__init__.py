"""
HTTP API routers, mounted under ``/api`` by ``serb_burger.main``.
"""

from fastapi import APIRouter

from serb_burger.api import (
    admin,
    categories,
    checkout,
    ingredients,
    menu,
    orders,
    products,
    session,
    webhooks,
)

api_router = APIRouter(prefix="/api")

for module in (categories, ingredients, products, menu, session, orders, checkout, admin, webhooks):
    api_router.include_router(module.router)

__all__ = ["api_router"]
