from sqlalchemy import Column, Integer, String, Date, DateTime, Text, JSON, Index

from core.database import Base


class EventUpdate(Base):
    """
    One submission by a user against an event.

    Rows are only ever inserted: a user reporting twice on the same event
    produces two rows, and the latest is picked by (update_date, id).
    """
    __tablename__ = "event_updates"
    __table_args__ = (
        Index("ix_event_updates_event_user", "event_id", "user_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)  # Reference to Event.id (no FK)
    user_id = Column(Integer, nullable=False, index=True)  # Reference to User.id (no FK)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    start_date_time = Column(DateTime, nullable=True)
    end_date_time = Column(DateTime, nullable=True)
    issue_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    attendees = Column(Text, nullable=True)
    type = Column(String(100), nullable=True)
    update_date = Column(Date, nullable=False)
    photos = Column(JSON, nullable=False, default=list)
    video = Column(String(1024), nullable=True)
    media_photos = Column(JSON, nullable=False, default=list)
