# storefront/repositories/cart_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.cart import Cart, utcnow


class CartRepository:
    """
    Data access layer for Cart.

    save() always runs Cart.recompute_totals() before committing, so stored
    totals never drift from the items.
    """

    def get_active_for_user(self, session: Session, user_id: uuid.UUID) -> Cart | None:
        stmt = select(Cart).where(Cart.user_id == user_id, Cart.is_active == True)  # noqa: E712
        return session.exec(stmt).first()

    def save(self, session: Session, cart: Cart) -> Cart:
        """
        Recompute totals, then insert or update the cart.

        Raises:
            sqlalchemy.exc.IntegrityError: another cart already exists for
            the user (racing first access).
        """
        cart.recompute_totals()
        cart.updated_at = utcnow()
        session.add(cart)
        session.commit()
        session.refresh(cart)
        return cart
