# storefront/repositories/stats_repo.py
from datetime import datetime

from sqlalchemy import func, or_
from sqlmodel import Session, select

from storefront.models.product import Product
from storefront.models.user import User


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def _count(self, session: Session, stmt) -> int:
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_users(self, session: Session) -> int:
        return self._count(session, select(func.count()).select_from(User))

    def count_active_users(self, session: Session) -> int:
        """Users not explicitly deactivated (NULL counts as active)."""
        stmt = (
            select(func.count())
            .select_from(User)
            .where(or_(User.is_active == True, User.is_active.is_(None)))  # noqa: E712
        )
        return self._count(session, stmt)

    def count_inactive_users(self, session: Session) -> int:
        stmt = select(func.count()).select_from(User).where(User.is_active == False)  # noqa: E712
        return self._count(session, stmt)

    def count_products(self, session: Session) -> int:
        return self._count(session, select(func.count()).select_from(Product))

    def count_registrations(
        self,
        session: Session,
        start: datetime,
        end: datetime | None = None,
    ) -> int:
        """Accounts created at or after `start` (and at or before `end`)."""
        stmt = select(func.count()).select_from(User).where(User.created_at >= start)
        if end is not None:
            stmt = stmt.where(User.created_at <= end)
        return self._count(session, stmt)

    def count_by_role(self, session: Session, role: str) -> int:
        condition = User.role == role
        if role == "user":
            # Rows without a role are plain users
            condition = or_(condition, User.role.is_(None))
        stmt = select(func.count()).select_from(User).where(condition)
        return self._count(session, stmt)

    def latest_users(self, session: Session, limit: int = 5) -> list[User]:
        """
        Latest N accounts by created_at.
        """
        stmt = select(User).order_by(User.created_at.desc()).limit(limit)
        return list(session.exec(stmt).all())
