from pydantic import BaseModel, ConfigDict, Field, field_serializer
from datetime import datetime
from typing import List, Literal, Optional

from app.utils.dates import format_wall_clock

EventStatus = Literal["ongoing", "previous"]


class EventFields(BaseModel):
    """Text fields of an admin event submission (multipart form)"""
    name: Optional[str] = Field(None, description="Event name")
    description: Optional[str] = Field(None, description="Event description")
    start_date_time: Optional[str] = Field(None, description="ISO-8601 start")
    end_date_time: Optional[str] = Field(None, description="ISO-8601 end")
    issue_date: Optional[str] = Field(None, description="ISO-8601 issue date")
    location: Optional[str] = Field(None, description="Event location")
    type: Optional[str] = Field(None, description="Event type")


class EventResponse(BaseModel):
    """Response schema for event"""
    id: int = Field(..., description="Event ID")
    name: str = Field(..., description="Event name")
    description: Optional[str] = Field(None, description="Event description")
    start_date_time: Optional[datetime] = Field(None, description="Start, YYYY-MM-DD HH:MM:SS")
    end_date_time: Optional[datetime] = Field(None, description="End, YYYY-MM-DD HH:MM:SS")
    issue_date: Optional[datetime] = Field(None, description="Issue date, YYYY-MM-DD HH:MM:SS")
    location: Optional[str] = Field(None, description="Event location")
    type: Optional[str] = Field(None, description="Event type")
    status: EventStatus = Field(..., description="Status frozen at creation time")
    photos: List[str] = Field(default_factory=list, description="Photo URLs")
    video: Optional[str] = Field(None, description="Video URL")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_date_time", "end_date_time", "issue_date")
    def serialize_wall_clock(self, value: Optional[datetime]) -> Optional[str]:
        return format_wall_clock(value)


class EventViewRequest(BaseModel):
    """Request schema for marking an event as viewed"""
    event_id: int = Field(..., description="Event ID")
    user_id: int = Field(..., description="User ID")


class EventCreateResponse(BaseModel):
    success: bool = True
    event_id: int = Field(..., description="ID of the created event")
