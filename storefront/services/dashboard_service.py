# storefront/services/dashboard_service.py
import math
from datetime import datetime, time, timedelta, timezone

from sqlmodel import Session

from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.dashboard import (
    ActivityEntry,
    DailyRegistrations,
    DashboardStats,
    RecentUser,
    RoleDistribution,
    StatusDistribution,
    UserAnalytics,
)

# Placeholder ratios standing in for order data (there is no order store).
# Kept so existing dashboard clients keep receiving the same figures.
ORDERS_PER_USER = 0.7
REVENUE_PER_USER = 150
PRODUCT_GROWTH_PERCENTAGE = 12.1
ORDER_GROWTH_PERCENTAGE = 15.3
REVENUE_GROWTH_PERCENTAGE = 22.4
LOW_STOCK_SHARE = 0.1
LOW_STOCK_FALLBACK = 3


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 1)


def relative_time(moment: datetime, now: datetime) -> str:
    """Human readable age, e.g. '5 minutes ago'."""
    seconds = max(0, int((now - _as_utc(moment)).total_seconds()))
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        count, unit = seconds // 60, "minute"
    elif seconds < 86400:
        count, unit = seconds // 3600, "hour"
    else:
        count, unit = seconds // 86400, "day"
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


class DashboardService:
    """
    Read-only figures for the admin dashboard.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_stats(self, session: Session, now: datetime | None = None) -> DashboardStats:
        now = now or datetime.now(timezone.utc)

        total_users = self.repo.count_users(session)
        active_users = self.repo.count_active_users(session)
        total_products = self.repo.count_products(session)
        recent_7d = self.repo.count_registrations(session, now - timedelta(days=7))
        recent_30d = self.repo.count_registrations(session, now - timedelta(days=30))

        total_orders = math.floor(total_users * ORDERS_PER_USER)
        total_revenue = math.floor(total_users * REVENUE_PER_USER)

        return DashboardStats(
            total_users=total_users,
            active_users=active_users,
            total_products=total_products,
            recent_users_7d=recent_7d,
            recent_users_30d=recent_30d,
            user_growth_percentage=_percentage(recent_30d, total_users),
            total_orders=total_orders,
            total_revenue=total_revenue,
            conversion_rate=_percentage(total_orders, total_users),
            product_growth_percentage=PRODUCT_GROWTH_PERCENTAGE,
            order_growth_percentage=ORDER_GROWTH_PERCENTAGE,
            revenue_growth_percentage=REVENUE_GROWTH_PERCENTAGE,
            low_stock_items=math.floor(total_products * LOW_STOCK_SHARE) or LOW_STOCK_FALLBACK,
        )

    def get_recent_users(self, session: Session, limit: int = 5) -> list[RecentUser]:
        return [
            RecentUser(
                id=user.id,
                name=user.name or "No Name",
                email=user.email,
                join_date=_as_utc(user.created_at).date().isoformat(),
                status="Active" if user.is_active is not False else "Inactive",
                role=user.role or "user",
            )
            for user in self.repo.latest_users(session, limit=limit)
        ]

    def get_recent_activity(
        self,
        session: Session,
        limit: int = 10,
        now: datetime | None = None,
    ) -> list[ActivityEntry]:
        """
        Recent activity feed. Registrations are the only tracked event.
        """
        now = now or datetime.now(timezone.utc)
        return [
            ActivityEntry(
                id=f"user_{user.id}",
                type="user_registration",
                description=f"New user registered: {user.email}",
                user=user.name or user.email,
                timestamp=_as_utc(user.created_at),
                time=relative_time(user.created_at, now),
            )
            for user in self.repo.latest_users(session, limit=limit)
        ]

    def get_user_analytics(self, session: Session, now: datetime | None = None) -> UserAnalytics:
        now = now or datetime.now(timezone.utc)
        today = now.date()

        daily: list[DailyRegistrations] = []
        for offset in range(6, -1, -1):
            day = today - timedelta(days=offset)
            start = datetime.combine(day, time.min, tzinfo=timezone.utc)
            end = datetime.combine(day, time.max, tzinfo=timezone.utc)
            daily.append(
                DailyRegistrations(
                    date=day.isoformat(),
                    count=self.repo.count_registrations(session, start, end),
                )
            )

        return UserAnalytics(
            daily_registrations=daily,
            role_distribution=RoleDistribution(
                admin=self.repo.count_by_role(session, "admin"),
                user=self.repo.count_by_role(session, "user"),
            ),
            status_distribution=StatusDistribution(
                active=self.repo.count_active_users(session),
                inactive=self.repo.count_inactive_users(session),
            ),
        )
