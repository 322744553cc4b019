# storefront/schemas/product.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from storefront.models.product import Dimensions, ProductImage

SortBy = Literal["price-low", "price-high", "rating", "newest"]
StockStatus = Literal["out-of-stock", "low-stock", "in-stock"]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


def _blank_to_none(v: str | None) -> str | None:
    if v is None:
        return v
    return v.strip() or None


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    description: str = Field(max_length=1000)
    price: float = Field(ge=0)
    compare_price: float | None = Field(default=None, ge=0)
    category: str
    subcategory: str | None = None
    brand: str | None = None
    sku: str | None = None
    images: list[ProductImage] = []
    image: str | None = None
    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)
    tags: list[str] = []
    specifications: dict[str, str] = {}
    dimensions: Dimensions | None = None
    is_active: bool = True
    is_featured: bool = False
    seo_title: str | None = None
    seo_description: str | None = None

    @field_validator("name", "description", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t.strip()]

    @field_validator("sku")
    @classmethod
    def clean_sku(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, ge=0)
    compare_price: float | None = Field(default=None, ge=0)
    category: str | None = None
    subcategory: str | None = None
    brand: str | None = None
    sku: str | None = None
    images: list[ProductImage] | None = None
    image: str | None = None
    stock: int | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    tags: list[str] | None = None
    specifications: dict[str, str] | None = None
    dimensions: Dimensions | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    seo_title: str | None = None
    seo_description: str | None = None

    @field_validator("name", "description", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _strip_required(v)

    @field_validator("sku")
    @classmethod
    def clean_sku(cls, v: str | None) -> str | None:
        # Blank clears the SKU
        return _blank_to_none(v)


class ProductPublic(SQLModel):
    """
    Product representation for storefront clients.
    """

    id: uuid.UUID
    name: str
    description: str
    price: float
    compare_price: float | None = None
    category: str
    subcategory: str | None = None
    brand: str | None = None
    images: list[ProductImage] = []
    image: str | None = None
    stock: int
    stock_status: StockStatus
    rating: float
    review_count: int
    tags: list[str] = []
    is_featured: bool
    discount_percentage: int
    created_at: datetime
    updated_at: datetime


class ReviewRead(SQLModel):
    user_id: uuid.UUID
    rating: int
    comment: str
    helpful: int
    created_at: datetime
    updated_at: datetime


class ProductAdminRead(ProductPublic):
    """Full product for admin screens, including audit columns."""

    sku: str | None = None
    low_stock_threshold: int
    specifications: dict[str, str] = {}
    dimensions: Dimensions | None = None
    reviews: list[ReviewRead] = []
    is_active: bool
    seo_title: str | None = None
    seo_description: str | None = None
    created_by: uuid.UUID | None = None
    updated_by: uuid.UUID | None = None


class ProductSearchFilters(SQLModel):
    category: str | None = None
    subcategory: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    in_stock: bool = False
    sort_by: SortBy | None = None


class ProductPage(SQLModel):
    items: list[ProductPublic]
    total: int
    skip: int
    limit: int


class ReviewCreate(SQLModel):
    """Rating range is enforced by the embedded Review model."""

    rating: int
    comment: str | None = Field(default=None, max_length=500)


class ReviewResponse(SQLModel):
    success: bool = True
    message: str
    rating: float
    review_count: int
    review: ReviewRead
