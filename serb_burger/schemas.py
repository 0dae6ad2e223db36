"""
Pydantic Schemas for Request/Response Validation

Field names are snake_case in Python and camelCase on the wire
(``categoryId``, ``selectionType``, ``totalAmount``...). Dependent counts
are exposed under ``_count`` like the admin screens expect.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from serb_burger.models import IngredientType, OrderStatus, PaymentMethod, SelectionType


# Ids and counters are stored as 32-bit integers
MAX_ID = 2**31 - 1

SLUG_PATTERN = r"^[a-z0-9-]+$"
SESSION_KEY_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"
URL_PATTERN = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _check_image_url(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if not URL_PATTERN.match(v):
        raise ValueError("Некорректный URL изображения")
    return v


# =============================================================================
# CATALOG REQUEST SCHEMAS
# =============================================================================

class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Бургеры"])
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN, examples=["burgers"])


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)


class IngredientCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Бекон"])
    price: float = Field(..., ge=0, examples=[60])
    type: IngredientType = Field(..., examples=["addon"])


class IngredientUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    type: Optional[IngredientType] = None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150, examples=["Сербский Классический"])
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    price: float = Field(..., ge=0, examples=[350])
    category_id: int = Field(..., gt=0, le=MAX_ID)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    image: Optional[str] = Field(None, max_length=500)
    price: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = Field(None, gt=0, le=MAX_ID)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class ProductIngredientCreate(CamelModel):
    ingredient_id: int = Field(..., gt=0, le=MAX_ID)
    selection_type: SelectionType
    is_required: bool = False
    max_quantity: Optional[int] = Field(None, ge=1, le=MAX_ID)
    sort_order: int = Field(0, ge=0, le=MAX_ID)


class ProductIngredientUpdate(CamelModel):
    selection_type: Optional[SelectionType] = None
    is_required: Optional[bool] = None
    max_quantity: Optional[int] = Field(None, ge=1, le=MAX_ID)
    sort_order: Optional[int] = Field(None, ge=0, le=MAX_ID)


# =============================================================================
# CATALOG RESPONSE SCHEMAS
# =============================================================================

class CategoryCount(BaseModel):
    products: int = 0


class CategoryOut(CamelModel):
    id: int
    name: str
    slug: str
    count: CategoryCount = Field(default_factory=CategoryCount, alias="_count")


class CategoryBrief(CamelModel):
    id: int
    name: str
    slug: str


class IngredientCount(CamelModel):
    product_ingredients: int = 0


class IngredientBrief(CamelModel):
    id: int
    name: str
    price: float
    type: IngredientType


class IngredientOut(IngredientBrief):
    count: IngredientCount = Field(default_factory=IngredientCount, alias="_count")


class ProductIngredientOut(CamelModel):
    id: int
    product_id: int
    ingredient_id: int
    selection_type: SelectionType
    is_required: bool
    max_quantity: Optional[int] = None
    sort_order: int
    ingredient: IngredientBrief


class ProductCount(CamelModel):
    order_items: int = 0


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: float
    category_id: int
    category: CategoryBrief
    product_ingredients: List[ProductIngredientOut] = []
    count: ProductCount = Field(default_factory=ProductCount, alias="_count")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class MenuIngredient(CamelModel):
    id: int
    name: str
    price: float
    type: IngredientType
    selection_type: SelectionType
    is_required: bool
    max_quantity: Optional[int] = None


class MenuProduct(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image: Optional[str] = None
    category: str
    ingredients: List[MenuIngredient] = []


class MenuCategory(CamelModel):
    id: int
    name: str
    slug: str
    items: List[MenuProduct] = []


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class SelectedIngredientIn(CamelModel):
    id: int = Field(..., gt=0, le=MAX_ID)
    price: Optional[float] = Field(None, ge=0)


class OrderItemIn(CamelModel):
    product_id: int = Field(..., gt=0, le=MAX_ID)
    quantity: int = Field(..., ge=1, le=99)
    selected_ingredients: List[SelectedIngredientIn] = []
    total_price: Optional[float] = Field(None, ge=0)


class OrderCreate(CamelModel):
    """Order placement after a successful payment."""
    items: List[OrderItemIn] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=1)
    payment_method: PaymentMethod
    transaction_id: Optional[str] = Field(None, max_length=100)


class OrderCreateResponse(CamelModel):
    success: bool = True
    order_id: int  # human-facing order number
    order_number: int
    total_amount: float
    qr_payload: str
    message: str = "Заказ успешно создан"


class OrderStatusResponse(CamelModel):
    number: int
    status: OrderStatus
    total_amount: float
    payment_method: PaymentMethod
    created_at: Optional[datetime] = None


class AdminOrderItemOut(CamelModel):
    product_id: int
    product_name: str
    quantity: int
    total_price: float
    selected_ingredients: List[dict] = []


class AdminOrderOut(CamelModel):
    id: int
    number: int
    total_amount: float
    payment_method: PaymentMethod
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[AdminOrderItemOut] = []


class OrderStatusUpdate(CamelModel):
    order_id: int = Field(..., gt=0, le=MAX_ID)
    status: OrderStatus


class ScanRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=64, examples=["ORDER:1024"])


# =============================================================================
# CHECKOUT SCHEMAS
# =============================================================================

class CheckoutRequest(CamelModel):
    """
    Either explicit ``items`` or a ``sessionKey`` whose cart is checked out.
    With a session key the cart is emptied and the new order becomes the
    session's active order.
    """
    items: Optional[List[OrderItemIn]] = Field(None, min_length=1)
    payment_method: PaymentMethod
    total_amount: Optional[float] = Field(None, ge=1)
    session_key: Optional[str] = Field(None, pattern=SESSION_KEY_PATTERN)

    @model_validator(mode="after")
    def check_source(self) -> "CheckoutRequest":
        if self.items is None and self.session_key is None:
            raise ValueError("items or sessionKey is required")
        return self


class CartItemAdd(CamelModel):
    product_id: int = Field(..., gt=0, le=MAX_ID)
    selected_ingredients: List[int] = Field(default_factory=list, examples=[[1, 4, 12]])


class QuantityChange(CamelModel):
    delta: int = Field(..., ge=-99, le=99, examples=[1])


class CheckoutResponse(CamelModel):
    success: bool = True
    order_number: int
    total_amount: float
    transaction_id: Optional[str] = None
    checkout_url: Optional[str] = None
    redirect_url: str
    qr_payload: str


# =============================================================================
# ADMIN / WEBHOOK / SYSTEM SCHEMAS
# =============================================================================

class LoginRequest(BaseModel):
    password: str = Field(..., min_length=1)


class WataWebhookPayload(BaseModel):
    """Inbound payment notification from WATA (provider's snake_case)."""
    status: Literal["success", "failed", "pending"]
    transaction_id: str
    order_id: str
    amount: Optional[float] = None
    signature: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    environment: str
    database: str
    payment_service: str
    products: int = 0
    categories: int = 0
    ingredients: int = 0
    timestamp: datetime
