# storefront/schemas/cart.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart. The unit price comes from the catalog.
    """

    product_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    Zero or a negative value removes the item.
    """

    quantity: int


class CouponApply(SQLModel):
    code: str = Field(min_length=1, max_length=50)
    discount_amount: float = Field(ge=0)


class CartProduct(SQLModel):
    """
    Product projection attached to a cart line.

    The plain cart view fills the brief fields only; the detailed view also
    sets images, category and is_active.
    """

    id: uuid.UUID
    name: str
    price: float
    image: str | None = None
    stock: int
    images: list[dict] | None = None
    category: str | None = None
    is_active: bool | None = None


class CartItemRead(SQLModel):
    """
    One cart line with its resolved product.

    `available` is False when the referenced product no longer exists (or
    is inactive, for the detailed view); `product` is then None but the line
    is still part of the cart totals.
    """

    product_id: uuid.UUID
    quantity: int
    price: float
    total_price: float
    available: bool
    product: CartProduct | None = None
    created_at: datetime
    updated_at: datetime


class CartSummary(SQLModel):
    total_items: int
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    coupon_code: str | None = None


class CartRead(CartSummary):
    """
    Full cart response model with totals.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    items: list[CartItemRead]
    formatted_subtotal: str
    formatted_total: str
    is_active: bool
    last_modified: datetime
