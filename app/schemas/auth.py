from typing import Optional, Union

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request schema for PIN login"""
    pin: Optional[Union[int, str]] = Field(None, description="Numeric PIN")


class LoginResponse(BaseModel):
    """Response schema for a successful login"""
    id: int = Field(..., description="User ID")
    username: str = Field(..., description="Display name")
    designation: Optional[str] = Field(None, description="Role tag")
    pin: str = Field(..., description="PIN")


class UserVisitSummary(BaseModel):
    """Visit statistics for the current month"""
    last_visit: Optional[str] = Field(None, description="Latest visit, YYYY-MM-DD HH:MM:SS")
    monthly_count: int = Field(0, description="Visits this month")
