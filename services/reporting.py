"""
Reporting Service

Builds the administrative participation report for an event: every entitled
non-admin member with the number of views and updates they recorded.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.schemas.event import EventResponse
from app.schemas.report import EventReportResponse, ParticipantSummary
from core.database import storage_errors
from core.exceptions import NotFoundError
from models.event import Event, EventEntitlement
from models.event_update import EventUpdate
from models.event_view import EventView
from models.user import User

logger = logging.getLogger(__name__)


class ReportAggregator:
    """Service for per-event participation summaries"""

    def __init__(self, db: Session, admin_designation: str = "Admin"):
        self.db = db
        self.admin_designation = admin_designation

    def participants(self, event_id: int) -> List[Dict[str, Any]]:
        """
        Count views and updates per entitled member.

        Args:
            event_id: Event ID

        Returns:
            List of dictionaries with user_id, name, designation, viewed_count, updated_count
        """
        viewed = (
            select(func.count(EventView.id))
            .where(EventView.user_id == User.id, EventView.event_id == event_id)
            .correlate(User)
            .scalar_subquery()
        )
        updated = (
            select(func.count(EventUpdate.id))
            .where(EventUpdate.user_id == User.id, EventUpdate.event_id == event_id)
            .correlate(User)
            .scalar_subquery()
        )

        with storage_errors(self.db, "build event report"):
            rows = (
                self.db.query(
                    User.id,
                    User.username,
                    User.designation,
                    viewed.label("viewed_count"),
                    updated.label("updated_count"),
                )
                .join(EventEntitlement, EventEntitlement.user_id == User.id)
                .filter(
                    EventEntitlement.event_id == event_id,
                    or_(User.designation.is_(None), User.designation != self.admin_designation)
                )
                .order_by(User.id)
                .all()
            )

        return [
            {
                "user_id": user_id,
                "name": username,
                "designation": designation,
                "viewed_count": viewed_count or 0,
                "updated_count": updated_count or 0,
            }
            for user_id, username, designation, viewed_count, updated_count in rows
        ]

    def report(self, event_id: int) -> EventReportResponse:
        """
        Build the report for an event.

        Raises:
            NotFoundError: If the event does not exist
            StorageError: If a query fails
        """
        with storage_errors(self.db, "load event"):
            event = self.db.query(Event).filter(Event.id == event_id).first()
        if event is None:
            raise NotFoundError(details=f"Event {event_id} not found")

        users = [ParticipantSummary(**row) for row in self.participants(event_id)]
        logger.info(f"Built report for event {event_id} with {len(users)} participant(s)")
        return EventReportResponse(users=users, event=EventResponse.model_validate(event))
