"""
Event update schemas for API request/response validation.

This module defines Pydantic schemas for the per-user update submissions
and for reading them back.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.utils.dates import format_wall_clock


class EventUpdateCreate(BaseModel):
    """Text fields of an update submission, as received from the form."""

    event_id: Optional[int] = Field(None, description="Event the update belongs to")
    user_id: Optional[int] = Field(None, description="Submitting user")
    name: Optional[str] = None
    description: Optional[str] = None
    start_date_time: Optional[str] = Field(None, description="ISO-8601 start")
    end_date_time: Optional[str] = Field(None, description="ISO-8601 end")
    issue_date: Optional[str] = Field(None, description="ISO-8601 issue date")
    location: Optional[str] = None
    attendees: Optional[str] = None
    type: Optional[str] = None


class EventUpdateResponse(BaseModel):
    """A stored update row."""

    id: int
    event_id: int
    user_id: int
    name: Optional[str] = None
    description: Optional[str] = None
    start_date_time: Optional[datetime] = None
    end_date_time: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    location: Optional[str] = None
    attendees: Optional[str] = None
    type: Optional[str] = None
    update_date: date
    photos: List[str] = Field(default_factory=list)
    video: Optional[str] = None
    media_photos: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_date_time", "end_date_time", "issue_date")
    def serialize_wall_clock(self, value: Optional[datetime]) -> Optional[str]:
        return format_wall_clock(value)


class EventUpdateSubmitResponse(BaseModel):
    """Schema returned after a successful submission."""

    success: bool = True
    photos: List[str] = Field(default_factory=list)
    video: Optional[str] = None
    media_photos: List[str] = Field(default_factory=list)
