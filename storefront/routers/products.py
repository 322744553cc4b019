# storefront/routers/products.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.auth import get_current_user, require_admin
from storefront.database import get_session
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
    ReviewResponse,
    SortBy,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=ProductPage)
def search_products(
    session: Session = Depends(get_session),
    q: str | None = None,
    category: str | None = None,
    subcategory: str | None = None,
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    in_stock: bool = False,
    sort_by: SortBy | None = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
):
    """
    Search active products.

    - `q` matches name, description and tags.
    - Without `sort_by`, text searches sort by relevance, others newest first.
    """
    filters = ProductSearchFilters(
        category=category,
        subcategory=subcategory,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        sort_by=sort_by,
    )
    return service.search(session, q, filters, skip=skip, limit=limit)


@router.get("/featured", response_model=list[ProductPublic])
def featured_products(
    session: Session = Depends(get_session),
    limit: int = Query(default=10, ge=1, le=50),
):
    """
    Active featured products, newest first.
    """
    return service.get_featured(session, limit)


@router.get("/{product_id}", response_model=ProductPublic)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.
    """
    return service.to_public(service.get_product(session, product_id))


# -------- Authenticated --------


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_review(
    product_id: uuid.UUID,
    payload: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Review a product. A second review by the same user replaces the first.
    """
    return service.add_review(session, current_user, product_id, payload)


# -------- Admin endpoints --------


@router.get(
    "/{product_id}/admin",
    response_model=ProductAdminRead,
    dependencies=[Depends(require_admin)],
)
def get_product_admin(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Full product record, including inactive products (admin only).
    """
    product = service.get_product(session, product_id, include_inactive=True)
    return service.to_admin(product)


@router.post(
    "",
    response_model=ProductAdminRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Create a new product (admin only).
    """
    return service.to_admin(service.create_product(session, admin, payload))


@router.patch("/{product_id}", response_model=ProductAdminRead)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Update an existing product (admin only).
    """
    return service.to_admin(service.update_product(session, admin, product_id, payload))


@router.delete("/{product_id}", response_model=ProductAdminRead)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Remove a product from the storefront (admin only).

    The row is deactivated, not deleted.
    """
    return service.to_admin(service.deactivate_product(session, admin, product_id))
