# storefront/services/cart_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.errors import Conflict, NotFound, ValidationFailed
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemRead,
    CartItemUpdate,
    CartProduct,
    CartRead,
    CartSummary,
    CouponApply,
)

logger = logging.getLogger(__name__)


def _brief(product: Product) -> CartProduct:
    return CartProduct(
        id=product.id,
        name=product.name,
        price=product.price,
        image=product.image,
        stock=product.stock,
    )


def _detailed(product: Product) -> CartProduct:
    return CartProduct(
        id=product.id,
        name=product.name,
        price=product.price,
        image=product.image,
        images=list(product.images or []),
        stock=product.stock,
        category=product.category,
        is_active=product.is_active,
    )


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - one lazily created cart per user
      - validate product existence, active flag and stock on add
      - take the price snapshot from Product.price
      - persist through CartRepository.save (totals recomputed there)
      - resolve item product references for the read views
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_valid_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise NotFound("Product not found", field="product_id")
        if not product.is_active:
            raise ValidationFailed("Product is inactive", field="product_id")
        return product

    def _load_or_create(self, session: Session, user_id: uuid.UUID) -> Cart:
        """
        Return the user's active cart, creating an empty one if needed.

        Two first requests for the same user can both miss the lookup; the
        unique user_id rejects the second insert. The loser rolls back and
        looks the winner's cart up once more.
        """
        cart = self.cart_repo.get_active_for_user(session, user_id)
        if cart is not None:
            return cart

        try:
            return self.cart_repo.save(session, Cart(user_id=user_id))
        except IntegrityError:
            session.rollback()
            logger.info("Cart creation raced for user %s, re-reading", user_id)

        cart = self.cart_repo.get_active_for_user(session, user_id)
        if cart is None:
            raise Conflict("Cart could not be created for this user", field="user_id")
        return cart

    def _to_read(self, session: Session, cart: Cart, detailed: bool) -> CartRead:
        items = cart.get_items()
        products = self.product_repo.get_many(session, [i.product_id for i in items])

        item_reads: list[CartItemRead] = []
        for item in items:
            product = products.get(item.product_id)
            if product is not None and detailed and not product.is_active:
                product = None

            if product is None:
                resolved = None
            elif detailed:
                resolved = _detailed(product)
            else:
                resolved = _brief(product)

            item_reads.append(
                CartItemRead(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                    total_price=item.total_price,
                    available=resolved is not None,
                    product=resolved,
                    created_at=item.created_at,
                    updated_at=item.updated_at,
                )
            )

        return CartRead(
            id=cart.id,
            user_id=cart.user_id,
            items=item_reads,
            formatted_subtotal=cart.formatted_subtotal,
            formatted_total=cart.formatted_total,
            is_active=cart.is_active,
            last_modified=cart.last_modified,
            **cart.get_summary(),
        )

    # ---- public operations ----

    def get_or_create_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        """Cart with items resolved to a brief product projection."""
        cart = self._load_or_create(session, user_id)
        return self._to_read(session, cart, detailed=False)

    def get_cart_with_products(self, session: Session, user_id: uuid.UUID) -> CartRead:
        """
        Cart with items resolved to a detailed projection.

        Lines whose product is missing or inactive stay in the cart and are
        reported with available=False.

        Raises:
            NotFound(404): if the user has no active cart.
        """
        cart = self.cart_repo.get_active_for_user(session, user_id)
        if cart is None:
            raise NotFound("Cart not found")
        return self._to_read(session, cart, detailed=True)

    def get_summary(self, session: Session, user_id: uuid.UUID) -> CartSummary:
        cart = self._load_or_create(session, user_id)
        return CartSummary.model_validate(cart.get_summary())

    def add_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CartItemCreate,
    ) -> CartRead:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist and be active
          - resulting quantity <= stock
          - unit price is taken from current product.price
        """
        product = self._get_valid_product(session, payload.product_id)
        cart = self._load_or_create(session, user_id)

        existing = cart.find_item(product.id)
        wanted = payload.quantity + (existing.quantity if existing else 0)
        if wanted > product.stock:
            raise ValidationFailed("Not enough stock available", field="quantity")

        cart.add_item(product.id, payload.quantity, product.price)
        cart = self.cart_repo.save(session, cart)
        return self._to_read(session, cart, detailed=False)

    def update_item_quantity(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartRead:
        """
        Set the quantity of an item; zero or less removes it.

        Raises:
            NotFound(404): if the product is not in the cart.
        """
        cart = self._load_or_create(session, user_id)
        cart.update_item_quantity(product_id, payload.quantity)
        cart = self.cart_repo.save(session, cart)
        return self._to_read(session, cart, detailed=False)

    def remove_item(
        self,
        session: Session,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
    ) -> CartRead:
        """Remove a product from the cart; absent products are ignored."""
        cart = self._load_or_create(session, user_id)
        cart.remove_item(product_id)
        cart = self.cart_repo.save(session, cart)
        return self._to_read(session, cart, detailed=False)

    def clear_cart(self, session: Session, user_id: uuid.UUID) -> CartRead:
        """Empty the cart and drop any coupon."""
        cart = self._load_or_create(session, user_id)
        cart.clear_cart()
        cart = self.cart_repo.save(session, cart)
        return self._to_read(session, cart, detailed=False)

    def apply_coupon(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: CouponApply,
    ) -> CartSummary:
        """
        Store the coupon code and discount as given. Whether the coupon is
        legitimate is decided by the caller.
        """
        cart = self._load_or_create(session, user_id)
        cart.apply_coupon(payload.code.strip(), payload.discount_amount)
        cart = self.cart_repo.save(session, cart)
        return CartSummary.model_validate(cart.get_summary())

    def remove_coupon(self, session: Session, user_id: uuid.UUID) -> CartSummary:
        cart = self._load_or_create(session, user_id)
        cart.remove_coupon()
        cart = self.cart_repo.save(session, cart)
        return CartSummary.model_validate(cart.get_summary())
