"""
Event Update Store

Owns the append-only event_updates table. Every submission becomes a new
row; nothing here updates or deletes an existing one.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.schemas.event_update import EventUpdateCreate
from app.utils.dates import normalize_datetime, today
from app.utils.validation import require_fields
from core.database import storage_errors
from models.event_update import EventUpdate
from services.media_ingestion import MediaResult

logger = logging.getLogger(__name__)


@dataclass
class NormalizedUpdate:
    """Submission fields after validation and date normalization."""
    event_id: int
    user_id: int
    name: Optional[str]
    description: Optional[str]
    start_date_time: Optional[datetime]
    end_date_time: Optional[datetime]
    issue_date: Optional[datetime]
    location: Optional[str]
    attendees: Optional[str]
    type: Optional[str]


class EventUpdateStore:
    """Service for recording event update submissions"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def prepare(record: EventUpdateCreate) -> NormalizedUpdate:
        """
        Validate a submission before any media is uploaded.

        Raises:
            ValidationError: If event_id/user_id are missing or a date is malformed
        """
        require_fields(record.model_dump(), "event_id", "user_id")
        return NormalizedUpdate(
            event_id=record.event_id,
            user_id=record.user_id,
            name=record.name,
            description=record.description,
            start_date_time=normalize_datetime(record.start_date_time, "start_date_time"),
            end_date_time=normalize_datetime(record.end_date_time, "end_date_time"),
            issue_date=normalize_datetime(record.issue_date, "issue_date"),
            location=record.location,
            attendees=record.attendees,
            type=record.type,
        )

    def submit(self, record: EventUpdateCreate, media: Optional[MediaResult] = None) -> int:
        """
        Append one update row.

        Args:
            record: Text fields of the submission
            media: Uploaded media URLs (empty when nothing was attached)

        Returns:
            int: ID of the new row

        Raises:
            ValidationError: If required fields are missing
            StorageError: If the insert fails
        """
        fields = self.prepare(record)
        media = media or MediaResult()

        row = EventUpdate(
            event_id=fields.event_id,
            user_id=fields.user_id,
            name=fields.name,
            description=fields.description,
            start_date_time=fields.start_date_time,
            end_date_time=fields.end_date_time,
            issue_date=fields.issue_date,
            location=fields.location,
            attendees=fields.attendees,
            type=fields.type,
            update_date=today(),
            photos=list(media.photos),
            video=media.video,
            media_photos=list(media.media_photos),
        )

        with storage_errors(self.db, "store event update"):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)

        logger.info(
            f"Stored update {row.id} for event {row.event_id} by user {row.user_id} "
            f"({len(row.photos)} photo(s), video={'yes' if row.video else 'no'}, "
            f"{len(row.media_photos)} media photo(s))"
        )
        return row.id
