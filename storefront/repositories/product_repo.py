# storefront/repositories/product_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.product import Product, utcnow


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Every write goes through save(), which recomputes rating/review_count
      and search_tags before committing.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_sku(self, session: Session, sku: str) -> Product | None:
        stmt = select(Product).where(Product.sku == sku)
        return session.exec(stmt).first()

    def get_many(self, session: Session, product_ids: list[uuid.UUID]) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    def get_featured(self, session: Session, limit: int = 10) -> list[Product]:
        return list(session.exec(Product.featured_query(limit)).all())

    def page(self, session: Session, stmt, skip: int = 0, limit: int = 20) -> tuple[list[Product], int]:
        """
        Run a search statement for one page and count all its matches.
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = session.exec(count_stmt).one()
        rows = session.exec(stmt.offset(skip).limit(limit)).all()
        return list(rows), int(total or 0)

    def save(self, session: Session, product: Product) -> Product:
        """Recompute derived fields, then insert or update the row."""
        product.recompute_rating()
        product.recompute_search_tags()
        product.updated_at = utcnow()
        session.add(product)
        session.commit()
        session.refresh(product)
        return product
