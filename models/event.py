from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, PrimaryKeyConstraint
from sqlalchemy.sql import func

from core.database import Base

STATUS_ONGOING = "ongoing"
STATUS_PREVIOUS = "previous"


class Event(Base):
    """
    Event model

    Represents an organizational activity that members report on. The status
    is classified once at creation time and never recomputed.
    """
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date_time = Column(DateTime, nullable=True)
    end_date_time = Column(DateTime, nullable=True)
    issue_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    type = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, index=True)
    photos = Column(JSON, nullable=False, default=list)
    video = Column(String(1024), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EventEntitlement(Base):
    """Which users may see and report on which event (event_users)."""
    __tablename__ = "event_users"
    __table_args__ = (PrimaryKeyConstraint("event_id", "user_id"),)

    event_id = Column(Integer, nullable=False, index=True)  # Reference to Event.id (no FK)
    user_id = Column(Integer, nullable=False, index=True)  # Reference to User.id (no FK)
