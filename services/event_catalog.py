"""
Event Catalog Service

This service owns events and their entitlements (event_users): creating an
event and broadcasting it to members, and listing events by status with the
per-viewer "already updated" flag.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.schemas.event import EventFields, EventResponse
from app.utils.dates import normalize_datetime, utcnow
from app.utils.validation import require_fields
from core.database import storage_errors
from models.event import Event, EventEntitlement, STATUS_ONGOING, STATUS_PREVIOUS
from models.event_update import EventUpdate
from models.user import User
from services.media_ingestion import MediaResult

logger = logging.getLogger(__name__)


def derive_status(start_date_time: Optional[datetime], now: datetime) -> str:
    """'ongoing' iff the event starts strictly after ``now``."""
    if start_date_time is not None and start_date_time > now:
        return STATUS_ONGOING
    return STATUS_PREVIOUS


class EventCatalog:
    """Service for event creation, broadcast and listing"""

    def __init__(
        self,
        db: Session,
        admin_designation: str = "Admin",
        broadcast_all_targets: Iterable[str] = ("all",)
    ):
        self.db = db
        self.admin_designation = admin_designation
        self.broadcast_all_targets = {target.strip().lower() for target in broadcast_all_targets}

    def is_broadcast_all(self, target: Optional[str]) -> bool:
        return bool(target) and target.strip().lower() in self.broadcast_all_targets

    @staticmethod
    def prepare(fields: EventFields) -> Dict[str, Any]:
        """
        Validate event fields before media is uploaded.

        Raises:
            ValidationError: If name or start_date_time is missing, or a date is malformed
        """
        require_fields(fields.model_dump(), "name", "start_date_time")
        return {
            "name": fields.name.strip(),
            "description": fields.description,
            "start_date_time": normalize_datetime(fields.start_date_time, "start_date_time"),
            "end_date_time": normalize_datetime(fields.end_date_time, "end_date_time"),
            "issue_date": normalize_datetime(fields.issue_date, "issue_date"),
            "location": fields.location,
            "type": fields.type,
        }

    def create_event(
        self,
        fields: EventFields,
        broadcast_target: Optional[str] = None,
        media: Optional[MediaResult] = None,
        now: Optional[datetime] = None
    ) -> int:
        """
        Create an event and, for a broadcast-to-all target, its entitlements.

        The event row and the entitlement rows are committed together; a
        failure in either rolls both back.

        Returns:
            int: ID of the new event

        Raises:
            ValidationError: If required fields are missing
            StorageError: If the transaction fails
        """
        values = self.prepare(fields)
        media = media or MediaResult()
        now = now or utcnow()

        event = Event(
            **values,
            status=derive_status(values["start_date_time"], now),
            photos=list(media.photos),
            video=media.video,
        )

        with storage_errors(self.db, "create event"):
            self.db.add(event)
            self.db.flush()

            granted = 0
            if self.is_broadcast_all(broadcast_target):
                user_ids = [
                    user_id for (user_id,) in self.db.query(User.id)
                    .filter(or_(User.designation.is_(None), User.designation != self.admin_designation))
                    .order_by(User.id)
                    .all()
                ]
                self.db.add_all(EventEntitlement(event_id=event.id, user_id=user_id) for user_id in user_ids)
                granted = len(user_ids)

            self.db.commit()

        logger.info(f"Created event {event.id} ({event.status}), entitled {granted} user(s)")
        return event.id

    def get_event(self, event_id: int) -> Optional[Event]:
        with storage_errors(self.db, "load event"):
            return self.db.query(Event).filter(Event.id == event_id).first()

    def list_events(self, status: str, viewer_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        List events with the given status.

        When a viewer is given each event carries ``userHasUpdated``, computed
        with a single query over all returned event IDs. Without a viewer the
        key is absent.
        """
        with storage_errors(self.db, "list events"):
            events = self.db.query(Event).filter(Event.status == status).order_by(Event.id).all()

            updated_ids = set()
            if viewer_id is not None and events:
                rows = (
                    self.db.query(EventUpdate.event_id)
                    .filter(
                        EventUpdate.user_id == viewer_id,
                        EventUpdate.event_id.in_([event.id for event in events])
                    )
                    .distinct()
                    .all()
                )
                updated_ids = {event_id for (event_id,) in rows}

        results = []
        for event in events:
            item = EventResponse.model_validate(event).model_dump(mode="json")
            if viewer_id is not None:
                item["userHasUpdated"] = event.id in updated_ids
            results.append(item)
        return results
