from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from app.models.trip_request import TripRequestStatus
from app.schemas.common import MAX_ID
from app.schemas.destination import DestinationSummary
from app.schemas.user import UserSummary

class TripRequestCreate(BaseModel):
    destination_id: int = Field(..., le=MAX_ID)
    description: Optional[str] = None
    departure_at: datetime
    return_at: datetime
    # Honoured for admins only
    traveler_id: Optional[int] = Field(None, le=MAX_ID)

class TripRequestUpdate(BaseModel):
    destination_id: Optional[int] = Field(None, le=MAX_ID)
    description: Optional[str] = None
    departure_at: Optional[datetime] = None
    return_at: Optional[datetime] = None

class TripRequestStatusUpdate(BaseModel):
    status: TripRequestStatus = Field(..., description="requested, approved or cancelled")

class TripRequestTraveler(BaseModel):
    id: int
    name: str
    is_active: bool
    user: UserSummary

    class Config:
        from_attributes = True

class TripRequestResponse(BaseModel):
    id: int
    traveler_id: int
    destination_id: int
    description: Optional[str] = None
    departure_at: datetime
    return_at: datetime
    status: TripRequestStatus
    created_at: datetime
    updated_at: datetime
    traveler: TripRequestTraveler
    destination: DestinationSummary

    class Config:
        from_attributes = True
