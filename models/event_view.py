from sqlalchemy import Column, Integer, DateTime, UniqueConstraint

from core.database import Base


class EventView(Base):
    """First view of an event by a user; at most one row per pair."""
    __tablename__ = "event_views"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_views_event_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)  # Reference to Event.id (no FK)
    user_id = Column(Integer, nullable=False, index=True)  # Reference to User.id (no FK)
    view_date_time = Column(DateTime, nullable=False)
