from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

class DestinationBase(BaseModel):
    city: str = Field(..., min_length=1, max_length=255)
    state: Optional[str] = Field(None, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)

class DestinationCreate(DestinationBase):
    pass

class DestinationUpdate(BaseModel):
    city: Optional[str] = Field(None, max_length=255)
    state: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=255)

class DestinationSummary(BaseModel):
    id: int
    city: str
    state: Optional[str] = None
    country: str
    full_location: str

    class Config:
        from_attributes = True

class DestinationResponse(DestinationSummary):
    created_at: datetime
    updated_at: datetime
    trip_requests_count: Optional[int] = None
