"""
SQLAlchemy Database Models

Catalog (categories, ingredients, products and their ingredient links)
and orders with their frozen line items.
"""

import enum
import json

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Text,
    Enum,
    Boolean,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from serb_burger.database import Base


def _values(enum_cls):
    return [member.value for member in enum_cls]


class IngredientType(str, enum.Enum):
    """Kind of add-on; drives grouping in the customizer."""
    BUN = "bun"
    PATTY = "patty"
    CHEESE = "cheese"
    VEGETABLE = "vegetable"
    VEGGIE = "veggie"
    ADDON = "addon"
    SAUCE = "sauce"


class SelectionType(str, enum.Enum):
    """How a linked ingredient may be picked."""
    SINGLE = "single"
    MULTIPLE = "multiple"


class OrderStatus(str, enum.Enum):
    """Order status workflow. COMPLETED is the archival state."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    CASH = "cash"


class Category(Base):
    """Named grouping of products with a unique URL slug."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Category #{self.id} - {self.slug}>"


class Ingredient(Base):
    """Priced, typed add-on usable across products."""
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False, default=0.0)
    type = Column(
        Enum(IngredientType, values_callable=_values, name="ingredient_type"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Ingredient #{self.id} - {self.name} ({self.type.value})>"


class Product(Base):
    """Sellable menu item."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    price = Column(Float, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    category = relationship("Category", lazy="selectin")
    ingredient_links = relationship(
        "ProductIngredient",
        back_populates="product",
        order_by="ProductIngredient.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Product #{self.id} - {self.name}>"


class ProductIngredient(Base):
    """
    Attaches an ingredient to a product together with its selection policy.

    max_quantity only matters for MULTIPLE selection; None means unbounded.
    """
    __tablename__ = "product_ingredients"
    __table_args__ = (
        UniqueConstraint("product_id", "ingredient_id", name="uq_product_ingredient"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False, index=True)
    selection_type = Column(
        Enum(SelectionType, values_callable=_values, name="selection_type"),
        nullable=False,
        default=SelectionType.MULTIPLE,
    )
    is_required = Column(Boolean, nullable=False, default=False)
    max_quantity = Column(Integer, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="ingredient_links")
    ingredient = relationship("Ingredient", lazy="selectin")

    def __repr__(self):
        return (
            f"<ProductIngredient product={self.product_id} "
            f"ingredient={self.ingredient_id} {self.selection_type.value}>"
        )


class Order(Base):
    """
    Placed order. Items never change after creation; status is the only
    field mutated afterwards.
    """
    __tablename__ = "orders"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    number = Column(Integer, nullable=False, unique=True, index=True)
    total_amount = Column(Float, nullable=False)
    payment_method = Column(
        Enum(PaymentMethod, values_callable=_values, name="payment_method"),
        nullable=False,
    )
    status = Column(
        Enum(OrderStatus, values_callable=_values, name="order_status"),
        default=OrderStatus.PREPARING,
        nullable=False,
        index=True,
    )
    transaction_id = Column(String(100), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order #{self.number} - {self.status.value} - {self.total_amount}>"


class OrderItem(Base):
    """
    One purchased line. ``selected_ingredients`` is a JSON snapshot of
    ``[{id, name, price}]`` taken when the order was placed.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # unit price incl. ingredients
    selected_ingredients = Column(Text, nullable=False, default="[]")

    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="selectin")

    @property
    def ingredients_snapshot(self) -> list[dict]:
        return json.loads(self.selected_ingredients or "[]")

    def __repr__(self):
        return f"<OrderItem product={self.product_id} x{self.quantity}>"
