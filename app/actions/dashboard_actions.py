"""
Server actions behind the dashboard; every call reads the database
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.auth.permissions import authorize
from app.schemas.common import ActionResult
from app.schemas.user import SessionUser
from app.services.dashboard_service import DashboardService
from app.utils.error_handler import action_boundary

@action_boundary("fetch dashboard stats")
async def get_dashboard_stats(session: Optional[SessionUser], db: Session) -> ActionResult:
    authorize(session, "dashboard:read")
    stats = await DashboardService(db).get_stats()
    return ActionResult.ok(stats)

@action_boundary("fetch monthly registrations")
async def get_monthly_registrations(session: Optional[SessionUser], db: Session) -> ActionResult:
    authorize(session, "dashboard:read")
    months = await DashboardService(db).get_monthly_registrations()
    return ActionResult.ok(months)

@action_boundary("fetch program distribution")
async def get_program_distribution(session: Optional[SessionUser], db: Session) -> ActionResult:
    authorize(session, "dashboard:read")
    distribution = await DashboardService(db).get_program_distribution()
    return ActionResult.ok(distribution)

@action_boundary("fetch recent clients")
async def get_recent_clients(session: Optional[SessionUser], db: Session, limit: int = 5) -> ActionResult:
    authorize(session, "dashboard:read")
    if limit < 1 or limit > 50:
        limit = 5

    recent = await DashboardService(db).get_recent_clients(limit)
    return ActionResult.ok(recent)
