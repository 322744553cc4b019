# storefront/schemas/dashboard.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

# Fields of DashboardStats computed by fixed formulas from user/product
# counts rather than from order data (there is no order store).
SYNTHETIC_STAT_FIELDS = [
    "total_orders",
    "total_revenue",
    "conversion_rate",
    "product_growth_percentage",
    "order_growth_percentage",
    "revenue_growth_percentage",
    "low_stock_items",
]


class DashboardStats(SQLModel):
    """
    Headline numbers for the admin dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_users: int
    active_users: int
    total_products: int
    recent_users_7d: int
    recent_users_30d: int
    user_growth_percentage: float

    total_orders: int
    total_revenue: int
    conversion_rate: float
    product_growth_percentage: float
    order_growth_percentage: float
    revenue_growth_percentage: float
    low_stock_items: int

    synthetic_fields: list[str] = SYNTHETIC_STAT_FIELDS


class RecentUser(SQLModel):
    """
    Lightweight info for the newest accounts.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    name: str
    email: str
    join_date: str
    status: str
    role: str


class ActivityEntry(SQLModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    type: str
    description: str
    user: str
    timestamp: datetime
    time: str


class DailyRegistrations(SQLModel):
    """
    New accounts per UTC day.
    """
    model_config = ConfigDict(extra="forbid")

    date: str
    count: int


class RoleDistribution(SQLModel):
    admin: int
    user: int


class StatusDistribution(SQLModel):
    active: int
    inactive: int


class UserAnalytics(SQLModel):
    """
    Full payload for the user analytics panel.
    """
    model_config = ConfigDict(extra="forbid")

    daily_registrations: list[DailyRegistrations]
    role_distribution: RoleDistribution
    status_distribution: StatusDistribution
