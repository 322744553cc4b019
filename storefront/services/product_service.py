# storefront/services/product_service.py
import logging
import uuid
from typing import Any

from pydantic import ValidationError
from sqlmodel import Session

from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.models.product import Product
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import (
    ProductAdminRead,
    ProductCreate,
    ProductPage,
    ProductPublic,
    ProductSearchFilters,
    ProductUpdate,
    ReviewCreate,
    ReviewRead,
    ReviewResponse,
)

logger = logging.getLogger(__name__)

# JSON columns: stored as plain lists/dicts
_JSON_FIELDS = {"images", "dimensions"}

# Columns that cannot be cleared by a partial update
_NOT_NULL_FIELDS = {
    "name", "description", "price", "category", "stock",
    "low_stock_threshold", "is_active", "is_featured", "tags", "specifications",
}


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - SKU uniqueness
      - catalog search / featured listing
      - reviews (one per user, rating recomputed on save)
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Views -----

    @staticmethod
    def to_public(product: Product) -> ProductPublic:
        return ProductPublic.model_validate(product.get_public_data())

    @staticmethod
    def to_admin(product: Product) -> ProductAdminRead:
        data: dict[str, Any] = product.get_public_data()
        data.update(
            sku=product.sku,
            low_stock_threshold=product.low_stock_threshold,
            specifications=dict(product.specifications or {}),
            dimensions=product.dimensions,
            reviews=[r.model_dump() for r in product.get_reviews()],
            is_active=product.is_active,
            seo_title=product.seo_title,
            seo_description=product.seo_description,
            created_by=product.created_by,
            updated_by=product.updated_by,
        )
        return ProductAdminRead.model_validate(data)

    # ----- Helpers -----

    def _ensure_unique_sku(
        self,
        session: Session,
        sku: str | None,
        product_id: uuid.UUID | None = None,
    ) -> None:
        if not sku:
            return
        existing = self.repo.get_by_sku(session, sku)
        if existing is not None and existing.id != product_id:
            raise Conflict("A product with this SKU already exists", field="sku")

    # ----- Queries -----

    def get_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        include_inactive: bool = False,
    ) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product or (not product.is_active and not include_inactive):
            raise NotFound("Product not found", field="product_id")
        return product

    def search(
        self,
        session: Session,
        query: str | None,
        filters: ProductSearchFilters,
        skip: int = 0,
        limit: int = 20,
    ) -> ProductPage:
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationFailed("min_price cannot exceed max_price", field="min_price")

        stmt = Product.search_products(query, **filters.model_dump())
        products, total = self.repo.page(session, stmt, skip=skip, limit=limit)
        return ProductPage(
            items=[self.to_public(p) for p in products],
            total=total,
            skip=skip,
            limit=limit,
        )

    def get_featured(self, session: Session, limit: int = 10) -> list[ProductPublic]:
        return [self.to_public(p) for p in self.repo.get_featured(session, limit)]

    # ----- Admin -----

    def create_product(
        self,
        session: Session,
        actor: User,
        payload: ProductCreate,
    ) -> Product:
        self._ensure_unique_sku(session, payload.sku)

        data = payload.model_dump(mode="json", exclude=_JSON_FIELDS)
        product = Product(
            **data,
            images=[img.model_dump() for img in payload.images],
            dimensions=payload.dimensions.model_dump() if payload.dimensions else None,
            created_by=actor.id,
            updated_by=actor.id,
        )
        product = self.repo.save(session, product)
        logger.info("Product %s created by %s", product.id, actor.email)
        return product

    def update_product(
        self,
        session: Session,
        actor: User,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product; only fields present in the payload
        change. rating/review_count are not editable.
        """
        product = self.get_product(session, product_id, include_inactive=True)
        changes = payload.model_dump(exclude_unset=True, mode="json")

        if "sku" in changes:
            self._ensure_unique_sku(session, changes["sku"], product.id)

        for key, value in changes.items():
            if value is None and key in _NOT_NULL_FIELDS:
                raise ValidationFailed(f"{key} cannot be null", field=key)
            setattr(product, key, value)
        product.updated_by = actor.id

        return self.repo.save(session, product)

    def deactivate_product(
        self,
        session: Session,
        actor: User,
        product_id: uuid.UUID,
    ) -> Product:
        """
        Hide a product from the storefront. Rows are kept so carts and
        reviews that reference it stay resolvable.
        """
        product = self.get_product(session, product_id, include_inactive=True)
        product.is_active = False
        product.updated_by = actor.id
        logger.info("Product %s deactivated by %s", product.id, actor.email)
        return self.repo.save(session, product)

    # ----- Reviews -----

    def add_review(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
        payload: ReviewCreate,
    ) -> ReviewResponse:
        """
        Add or replace the user's review, then persist (rating recompute).
        """
        product = self.get_product(session, product_id)
        try:
            review = product.add_review(user.id, payload.rating, payload.comment)
        except ValidationError as exc:
            field = str(exc.errors()[0]["loc"][-1])
            message = "Rating must be between 1 and 5" if field == "rating" else "Invalid review"
            raise ValidationFailed(message, field=field)

        product = self.repo.save(session, product)
        return ReviewResponse(
            message="Review added successfully",
            rating=product.rating,
            review_count=product.review_count,
            review=ReviewRead.model_validate(review.model_dump()),
        )
