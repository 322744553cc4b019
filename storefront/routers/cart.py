# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import get_current_user
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartRead,
    CartSummary,
    CouponApply,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartRead)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Get (or lazily create) the current user's cart.
    """
    return service.get_or_create_cart(session, current_user.id)


@router.get("/details", response_model=CartRead)
def get_cart_details(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Cart with product details. Lines for products that are gone or
    inactive come back with available=false.
    """
    return service.get_cart_with_products(session, current_user.id)


@router.get("/summary", response_model=CartSummary)
def get_cart_summary(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Totals only, without items.
    """
    return service.get_summary(session, current_user.id)


@router.post("/items", response_model=CartRead)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Add product to the current user's cart.

    Returns the updated cart.
    """
    return service.add_item(session, current_user.id, payload)


@router.patch("/items/{product_id}", response_model=CartRead)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Update quantity of a product in the cart (0 removes it).

    Returns the updated cart.
    """
    return service.update_item_quantity(
        session=session,
        user_id=current_user.id,
        product_id=product_id,
        payload=payload,
    )


@router.delete("/items/{product_id}", response_model=CartRead)
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Remove a product from the cart.

    Returns the updated cart.
    """
    return service.remove_item(session, current_user.id, product_id)


@router.delete("", response_model=CartRead)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Clear the entire cart, including any coupon.
    """
    return service.clear_cart(session, current_user.id)


@router.post("/coupon", response_model=CartSummary)
def apply_coupon(
    payload: CouponApply,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Attach a coupon code and its discount amount to the cart.
    """
    return service.apply_coupon(session, current_user.id, payload)


@router.delete("/coupon", response_model=CartSummary)
def remove_coupon(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Drop the coupon and its discount.
    """
    return service.remove_coupon(session, current_user.id)
