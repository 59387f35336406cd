"""
Aggregates behind the dashboard widgets
"""

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from datetime import date, datetime, timedelta, timezone
import calendar
import logging

from app.models.client import Client
from app.models.enrollment import ProgramEnrollment
from app.models.program import HealthProgram
from app.schemas.dashboard import (
    DashboardStats, MonthlyRegistration, ProgramDistribution, RecentClient, RecentClientProgram
)
from app.utils.error_handler import DatabaseError

logger = logging.getLogger(__name__)

PROGRAM_COLORS = [
    "#0ea5e9",  # blue
    "#22c55e",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#f43f5e",  # rose
    "#06b6d4",  # cyan
    "#14b8a6",  # teal
]

NEW_ENROLLMENT_WINDOW_DAYS = 30
REGISTRATION_MONTHS = 6

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def last_months(today: date, count: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the last `count` months, oldest first, ending with today's month"""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))

class DashboardService:
    """Read-only statistics over clients, programs and enrollments"""

    def __init__(self, db: Session):
        self.db = db

    async def get_stats(self, today: date = None) -> DashboardStats:
        today = today or datetime.now(timezone.utc).date()
        since = today - timedelta(days=NEW_ENROLLMENT_WINDOW_DAYS)
        try:
            total_clients = self.db.query(func.count(Client.id)).scalar()
            active_programs = (
                self.db.query(func.count(HealthProgram.id))
                .filter(HealthProgram.active.is_(True))
                .scalar()
            )
            new_enrollments = (
                self.db.query(func.count(ProgramEnrollment.id))
                .filter(ProgramEnrollment.enrollment_date > since)
                .scalar()
            )
        except Exception as e:
            logger.error(f"Failed to compute dashboard stats: {e}")
            raise DatabaseError(f"Failed to compute dashboard stats: {str(e)}", e)

        return DashboardStats(
            total_clients=total_clients or 0,
            active_programs=active_programs or 0,
            new_enrollments=new_enrollments or 0,
        )

    async def get_monthly_registrations(self, today: date = None) -> list[MonthlyRegistration]:
        """Clients registered per calendar month (UTC), last six months"""
        today = today or datetime.now(timezone.utc).date()
        months = last_months(today, REGISTRATION_MONTHS)
        first_year, first_month = months[0]
        start = datetime(first_year, first_month, 1, tzinfo=timezone.utc)

        counts = {key: 0 for key in months}
        try:
            rows = self.db.query(Client.created_at).filter(Client.created_at >= start).all()
        except Exception as e:
            logger.error(f"Failed to load registrations: {e}")
            raise DatabaseError(f"Failed to load monthly registrations: {str(e)}", e)

        for (created_at,) in rows:
            if created_at is None:
                continue
            created_at = _as_utc(created_at)
            key = (created_at.year, created_at.month)
            if key in counts:
                counts[key] += 1

        return [
            MonthlyRegistration(name=calendar.month_abbr[month], total=counts[(year, month)])
            for year, month in months
        ]

    async def get_program_distribution(self) -> list[ProgramDistribution]:
        """Active enrollments per active program, each with a chart colour"""
        try:
            rows = (
                self.db.query(HealthProgram.name, func.count(ProgramEnrollment.id))
                .outerjoin(
                    ProgramEnrollment,
                    (ProgramEnrollment.program_id == HealthProgram.id)
                    & (ProgramEnrollment.status == "active"),
                )
                .filter(HealthProgram.active.is_(True))
                .group_by(HealthProgram.id, HealthProgram.name)
                .order_by(HealthProgram.name.asc(), HealthProgram.id.asc())
                .all()
            )
        except Exception as e:
            logger.error(f"Failed to compute program distribution: {e}")
            raise DatabaseError(f"Failed to compute program distribution: {str(e)}", e)

        return [
            ProgramDistribution(name=name, value=count, color=PROGRAM_COLORS[i % len(PROGRAM_COLORS)])
            for i, (name, count) in enumerate(rows)
        ]

    async def get_recent_clients(self, limit: int = 5) -> list[RecentClient]:
        """Most recently touched clients with the programs they are enrolled in"""
        last_touched = func.coalesce(Client.updated_at, Client.created_at)
        try:
            clients = (
                self.db.query(Client)
                .options(selectinload(Client.enrollments).joinedload(ProgramEnrollment.program))
                .order_by(last_touched.desc(), Client.id.desc())
                .limit(limit)
                .all()
            )
        except Exception as e:
            logger.error(f"Failed to load recent clients: {e}")
            raise DatabaseError(f"Failed to load recent clients: {str(e)}", e)

        recent = []
        for client in clients:
            programs = [
                RecentClientProgram(id=e.program.id, name=e.program.name)
                for e in client.enrollments
                if e.program is not None and e.program.name
            ]
            recent.append(RecentClient(
                id=client.id,
                name=client.full_name,
                email=client.email,
                programs=programs,
                status="Active",
                last_updated=client.updated_at or client.created_at,
            ))
        return recent
