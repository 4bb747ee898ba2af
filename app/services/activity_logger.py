"""
Activity logging service for the order audit trail
"""

from sqlalchemy.orm import Session
from fastapi import Request
from app.models.activity_log import ActivityLog
import json
import logging
from typing import Optional

logger = logging.getLogger(__name__)

class ActivityLogger:
    """Service for recording audited actions"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        action: str,
        endpoint: str,
        method: str,
        status_code: int,
        username: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[dict] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Write one audit row; failures are logged and never raised"""
        try:
            details_str = None
            if details:
                try:
                    details_str = json.dumps(details, default=str)
                except (TypeError, ValueError):
                    details_str = str(details)

            activity_log = ActivityLog(
                action=action,
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                username=username,
                ip_address=ip_address,
                user_agent=user_agent,
                details=details_str,
                error_message=error_message
            )

            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)
            return activity_log

        except Exception as e:
            logger.error(f"Failed to log activity '{action}': {e}")
            try:
                self.db.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback after activity log failure failed: {rollback_error}")
            return None

    async def log_request(
        self,
        request: Request,
        action: str,
        status_code: int,
        username: Optional[str] = None,
        details: Optional[dict] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """log_activity with endpoint and client info taken from the request"""
        return await self.log_activity(
            action=action,
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            username=username,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            details=details,
            error_message=error_message
        )

    def get_recent_activities(self, limit: int = 100, action: Optional[str] = None) -> list[ActivityLog]:
        """Most recent audit rows, optionally for one action"""
        query = self.db.query(ActivityLog)
        if action:
            query = query.filter(ActivityLog.action == action)
        return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
