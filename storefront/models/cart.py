# storefront/models/cart.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field

from storefront.core.errors import NotFound


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CartItem(SQLModel):
    """
    Line in a cart, stored inside carts.items.

    `price` is the unit price snapshot supplied when the item was added;
    `total_price` is derived (price * quantity) on every save.
    """

    product_id: uuid.UUID
    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0)
    total_price: float = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Cart(SQLModel, table=True):
    """
    Shopping cart. One cart per user (unique user_id).

    Derived fields (subtotal, total_items, total, items[].total_price,
    last_modified) are overwritten by recompute_totals(), which
    CartRepository runs on every save.
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    items: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    subtotal: float = Field(default=0, ge=0)
    tax: float = Field(default=0, ge=0)
    shipping: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)
    total: float = Field(default=0, ge=0)
    total_items: int = Field(default=0, ge=0)

    coupon_code: str | None = None

    is_active: bool = Field(default=True, index=True)
    last_modified: datetime = Field(default_factory=utcnow)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # ----- Items -----

    def get_items(self) -> list[CartItem]:
        return [CartItem.model_validate(i) for i in self.items or []]

    def _set_items(self, items: list[CartItem]) -> None:
        # New list every time so the JSON column is flagged dirty
        self.items = [i.model_dump(mode="json") for i in items]

    def find_item(self, product_id: uuid.UUID) -> CartItem | None:
        for item in self.get_items():
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, product_id: uuid.UUID, quantity: int = 1, price: float = 0) -> None:
        """
        Add quantity of a product.

        An existing line is incremented and its price replaced with the
        supplied price; otherwise a new line is appended.
        """
        items = self.get_items()
        for item in items:
            if item.product_id == product_id:
                item.quantity += quantity
                item.price = price
                item.updated_at = utcnow()
                break
        else:
            items.append(
                CartItem(
                    product_id=product_id,
                    quantity=quantity,
                    price=price,
                    total_price=price * quantity,
                )
            )
        self._set_items(items)

    def update_item_quantity(self, product_id: uuid.UUID, quantity: int) -> None:
        """
        Set the quantity of a line; quantity <= 0 removes it.

        Raises:
            NotFound(404): if the product is not in the cart.
        """
        items = self.get_items()
        for idx, item in enumerate(items):
            if item.product_id == product_id:
                break
        else:
            raise NotFound("Item not found in cart", field="product_id")

        if quantity <= 0:
            items.pop(idx)
        else:
            item.quantity = quantity
            item.updated_at = utcnow()
        self._set_items(items)

    def remove_item(self, product_id: uuid.UUID) -> None:
        self._set_items([i for i in self.get_items() if i.product_id != product_id])

    def clear_cart(self) -> None:
        self.items = []
        self.coupon_code = None
        self.discount = 0.0

    # ----- Coupons -----

    def apply_coupon(self, code: str, discount_amount: float) -> None:
        self.coupon_code = code
        self.discount = discount_amount

    def remove_coupon(self) -> None:
        self.coupon_code = None
        self.discount = 0.0

    # ----- Totals -----

    def recompute_totals(self) -> None:
        """
        Derive line totals, subtotal, total_items and total from items.

        total = max(0, subtotal + tax + shipping - discount)
        """
        items = self.get_items()
        subtotal = 0.0
        total_items = 0
        for item in items:
            item.total_price = item.price * item.quantity
            subtotal += item.total_price
            total_items += item.quantity
        self._set_items(items)

        self.subtotal = subtotal
        self.total_items = total_items
        total = subtotal + (self.tax or 0) + (self.shipping or 0) - (self.discount or 0)
        self.total = max(0.0, total)
        self.last_modified = utcnow()

    @property
    def formatted_total(self) -> str:
        return f"{self.total:.2f}"

    @property
    def formatted_subtotal(self) -> str:
        return f"{self.subtotal:.2f}"

    def get_summary(self) -> dict[str, Any]:
        return {
            "total_items": self.total_items,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping": self.shipping,
            "discount": self.discount,
            "total": self.total,
            "coupon_code": self.coupon_code,
        }
