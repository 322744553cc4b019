# storefront/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.database import get_session
from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.dashboard import (
    ActivityEntry,
    DashboardStats,
    RecentUser,
    UserAnalytics,
)
from storefront.services.dashboard_service import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(require_admin)],
)

repo = StatsRepository()
service = DashboardService(repo)


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(session: Session = Depends(get_session)):
    """
    Headline numbers for the admin dashboard.

    Order, revenue and growth figures are placeholders derived from user and
    product counts; `synthetic_fields` lists them.
    """
    return service.get_stats(session)


@router.get("/recent-users", response_model=list[RecentUser])
def get_recent_users(
    limit: int = Query(default=5, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """
    Newest accounts, most recent first.
    """
    return service.get_recent_users(session, limit=limit)


@router.get("/recent-activity", response_model=list[ActivityEntry])
def get_recent_activity(
    limit: int = Query(default=10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """
    Recent activity feed (user registrations).
    """
    return service.get_recent_activity(session, limit=limit)


@router.get("/user-analytics", response_model=UserAnalytics)
def get_user_analytics(session: Session = Depends(get_session)):
    """
    Registrations per day for the last 7 days plus role and status
    distributions.
    """
    return service.get_user_analytics(session)
