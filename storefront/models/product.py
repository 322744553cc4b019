# storefront/models/product.py
import math
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, Index, case, func, or_
from sqlmodel import SQLModel, Field, select


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positive values (1.25 -> 1.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


# Relevance weights for text search
NAME_WEIGHT = 3
TAG_WEIGHT = 2
DESCRIPTION_WEIGHT = 1


class ProductImage(SQLModel):
    """Gallery image descriptor, stored inside products.images."""

    url: str = Field(min_length=1)
    alt: str | None = None
    is_primary: bool = False


class Dimensions(SQLModel):
    weight: float | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None


class Review(SQLModel):
    """
    Customer review embedded in products.reviews.

    Has no identity outside its product; one review per user per product.
    """

    user_id: uuid.UUID
    rating: int = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=500)
    helpful: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    Embedded values (reviews, images, tags, specifications, dimensions) are
    JSON columns owned by the row. Always assign a new list/dict when
    changing them so the ORM sees the change.

    `rating` and `review_count` are derived: recompute_rating() overwrites
    them. `search_tags` is the lower-cased, space-joined tag list that text
    search matches against; recompute_search_tags() rebuilds it.
    ProductRepository runs both on every save.
    """

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_category_subcategory", "category", "subcategory"),
        Index("ix_products_featured_created", "is_featured", "created_at"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=100, index=True)
    description: str = Field(max_length=1000)

    price: float = Field(ge=0, index=True)
    compare_price: float | None = Field(
        default=None,
        ge=0,
        description="Original price shown struck through",
    )

    category: str = Field(index=True)
    subcategory: str | None = None
    brand: str | None = None

    # Unique when present; NULLs do not collide
    sku: str | None = Field(default=None, unique=True)

    images: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    # Single image URL kept for older clients
    image: str | None = None

    stock: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)

    rating: float = Field(default=0, ge=0, le=5, index=True)
    review_count: int = Field(default=0, ge=0)
    reviews: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    tags: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    search_tags: str = Field(default="")
    specifications: dict[str, str] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    dimensions: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
    )

    is_active: bool = Field(default=True, index=True)
    is_featured: bool = Field(default=False)

    seo_title: str | None = None
    seo_description: str | None = None

    created_by: uuid.UUID | None = Field(default=None, foreign_key="users.id")
    updated_by: uuid.UUID | None = Field(default=None, foreign_key="users.id")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # ----- Computed on read -----

    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "out-of-stock"
        if self.stock <= self.low_stock_threshold:
            return "low-stock"
        return "in-stock"

    @property
    def discount_percentage(self) -> int:
        if self.compare_price and self.compare_price > self.price:
            ratio = (self.compare_price - self.price) / self.compare_price
            return int(round_half_up(ratio * 100))
        return 0

    # ----- Reviews -----

    def get_reviews(self) -> list[Review]:
        return [Review.model_validate(r) for r in self.reviews or []]

    def add_review(self, user_id: uuid.UUID, rating: int, comment: str | None = None) -> Review:
        """
        Replace the user's review (if any) with a new one.

        The caller persists the product; saving recomputes rating and
        review_count.

        Raises:
            pydantic.ValidationError: rating outside 1..5 or comment too long.
        """
        review = Review(
            user_id=user_id,
            rating=rating,
            comment=(comment or "").strip(),
        )
        kept = [r for r in self.reviews or [] if r.get("user_id") != str(user_id)]
        kept.append(review.model_dump(mode="json"))
        self.reviews = kept
        return review

    def recompute_rating(self) -> None:
        """Derive rating (mean, one decimal) and review_count from reviews."""
        ratings = [r["rating"] for r in self.reviews or []]
        self.review_count = len(ratings)
        if ratings:
            self.rating = round_half_up(sum(ratings) / len(ratings), 1)
        else:
            self.rating = 0.0

    def recompute_search_tags(self) -> None:
        self.search_tags = " ".join(t.strip().lower() for t in self.tags or [] if t.strip())

    # ----- Projections -----

    def get_public_data(self) -> dict[str, Any]:
        """Fields exposed to storefront clients (no audit columns)."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "compare_price": self.compare_price,
            "category": self.category,
            "subcategory": self.subcategory,
            "brand": self.brand,
            "images": list(self.images or []),
            "image": self.image,
            "stock": self.stock,
            "stock_status": self.stock_status,
            "rating": self.rating,
            "review_count": self.review_count,
            "tags": list(self.tags or []),
            "is_featured": self.is_featured,
            "discount_percentage": self.discount_percentage,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ----- Queries -----

    @classmethod
    def featured_query(cls, limit: int = 10):
        """Active featured products, newest first."""
        return (
            select(cls)
            .where(cls.is_active == True, cls.is_featured == True)  # noqa: E712
            .order_by(cls.created_at.desc())
            .limit(limit)
        )

    @classmethod
    def search_products(
        cls,
        query: str | None = None,
        *,
        category: str | None = None,
        subcategory: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        in_stock: bool = False,
        sort_by: str | None = None,
    ):
        """
        Build (but do not execute) a catalog search over active products.

        A product matches the text query when any whitespace-separated term
        occurs in its name, description or tags. Without an explicit sort_by
        a text query sorts by relevance, otherwise newest first.

        Returns:
            A Select statement; callers add offset/limit or count it.
        """
        stmt = select(cls).where(cls.is_active == True)  # noqa: E712

        score = None
        terms = [t.lower() for t in (query or "").split()]
        if terms:
            conditions = []
            weights = []
            for term in terms:
                name_hit = func.lower(cls.name).contains(term, autoescape=True)
                desc_hit = func.lower(cls.description).contains(term, autoescape=True)
                tag_hit = cls.search_tags.contains(term, autoescape=True)
                conditions.extend([name_hit, desc_hit, tag_hit])
                weights.extend([
                    case((name_hit, NAME_WEIGHT), else_=0),
                    case((tag_hit, TAG_WEIGHT), else_=0),
                    case((desc_hit, DESCRIPTION_WEIGHT), else_=0),
                ])
            stmt = stmt.where(or_(*conditions))
            score = sum(weights[1:], weights[0])

        if category:
            stmt = stmt.where(cls.category == category)
        if subcategory:
            stmt = stmt.where(cls.subcategory == subcategory)
        if min_price is not None:
            stmt = stmt.where(cls.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(cls.price <= max_price)
        if in_stock:
            stmt = stmt.where(cls.stock > 0)

        if sort_by == "price-low":
            stmt = stmt.order_by(cls.price.asc())
        elif sort_by == "price-high":
            stmt = stmt.order_by(cls.price.desc())
        elif sort_by == "rating":
            stmt = stmt.order_by(cls.rating.desc())
        elif sort_by == "newest":
            stmt = stmt.order_by(cls.created_at.desc())
        elif score is not None:
            stmt = stmt.order_by(score.desc(), cls.created_at.desc())
        else:
            stmt = stmt.order_by(cls.created_at.desc())

        return stmt
