"""
Activity logging service for REST access and authentication events
"""

from fastapi import Request
from sqlalchemy.orm import Session
from app.models.activity_log import ActivityLog
from typing import Optional
import logging

logger = logging.getLogger(__name__)

class ActivityLogger:
    """Service for logging user and API-key activity"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        actor: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Log an activity to the database; a failure here never fails the request"""
        try:
            activity_log = ActivityLog(
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                actor=actor,
                ip_address=ip_address,
                user_agent=user_agent,
                error_message=error_message
            )

            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)

            return activity_log

        except Exception as e:
            logger.error(f"Failed to log activity: {e}")
            self.db.rollback()
            return None

    async def log_request(
        self,
        request: Request,
        status_code: int,
        actor: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Log an activity using the request's path, method, client and user agent"""
        return await self.log_activity(
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            actor=actor,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            error_message=error_message
        )

    def get_recent_activities(self, limit: int = 100) -> list[ActivityLog]:
        """Get recent activities"""
        return (
            self.db.query(ActivityLog)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
            .all()
        )
