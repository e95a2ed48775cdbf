"""
View/Update Tracking Service

Records first views of events (idempotent per user and event) and looks up
the most recent update a user submitted for an event.
"""

import logging
from typing import Optional

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.utils.dates import utcnow
from core.database import storage_errors
from models.event_update import EventUpdate
from models.event_view import EventView

logger = logging.getLogger(__name__)


class ViewTracker:
    """Service for event views and latest-update lookups"""

    def __init__(self, db: Session):
        self.db = db

    def _insert_ignore(self, values: dict):
        dialect = self.db.get_bind().dialect.name
        index_elements = [EventView.event_id, EventView.user_id]
        if dialect == "postgresql":
            return postgresql_insert(EventView).values(**values).on_conflict_do_nothing(index_elements=index_elements)
        if dialect == "sqlite":
            return sqlite_insert(EventView).values(**values).on_conflict_do_nothing(index_elements=index_elements)
        if dialect in ("mysql", "mariadb"):
            return mysql_insert(EventView).values(**values).prefix_with("IGNORE")
        return insert(EventView).values(**values)

    def record_view(self, event_id: int, user_id: int) -> None:
        """
        Mark an event as viewed by a user.

        Repeat calls are absorbed by the (event_id, user_id) unique constraint:
        they succeed and never add a second row.

        Raises:
            StorageError: If the insert fails for any other reason
        """
        stmt = self._insert_ignore({
            "event_id": event_id,
            "user_id": user_id,
            "view_date_time": utcnow(),
        })
        with storage_errors(self.db, "record event view"):
            try:
                self.db.execute(stmt)
                self.db.commit()
            except IntegrityError:
                # Dialects without insert-ignore hit the unique constraint instead
                self.db.rollback()
                logger.info(f"Event {event_id} already viewed by user {user_id}")
                return
        logger.info(f"Recorded view of event {event_id} by user {user_id}")

    def latest_update(self, event_id: int, user_id: int) -> Optional[EventUpdate]:
        """
        Get the most recent update for (event, user).

        Ordered by update_date, then by id for updates on the same day.

        Returns:
            EventUpdate or None if the user never submitted one
        """
        with storage_errors(self.db, "load latest event update"):
            return (
                self.db.query(EventUpdate)
                .filter(EventUpdate.event_id == event_id, EventUpdate.user_id == user_id)
                .order_by(EventUpdate.update_date.desc(), EventUpdate.id.desc())
                .first()
            )
