from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.event import EventResponse


class ParticipantSummary(BaseModel):
    """Participation of one entitled member in an event"""
    user_id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    designation: Optional[str] = Field(None, description="Role tag")
    viewed_count: int = Field(0, description="EventView rows for this event")
    updated_count: int = Field(0, description="EventUpdate rows for this event")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventReportResponse(BaseModel):
    """Administrative report for one event"""
    users: List[ParticipantSummary] = Field(default_factory=list)
    event: EventResponse
