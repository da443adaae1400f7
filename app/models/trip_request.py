import enum

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.datetime_utils import utcnow


class TripRequestStatus(str, enum.Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    CANCELLED = "cancelled"


class TripRequest(Base):
    __tablename__ = "trip_requests"
    __table_args__ = (
        Index("ix_trip_requests_traveler_status", "traveler_id", "status"),
        Index("ix_trip_requests_destination_status", "destination_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    traveler_id = Column(Integer, ForeignKey("travelers.id", ondelete="CASCADE"), nullable=False)
    destination_id = Column(Integer, ForeignKey("destinations.id", ondelete="CASCADE"), nullable=False)

    description = Column(Text, nullable=True)
    departure_at = Column(DateTime, nullable=False, index=True)
    return_at = Column(DateTime, nullable=False)

    # requested, approved, cancelled
    status = Column(String(20), nullable=False, default=TripRequestStatus.REQUESTED.value, index=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    traveler = relationship("Traveler", back_populates="trip_requests")
    destination = relationship("Destination", back_populates="trip_requests")

    @property
    def owning_user_id(self) -> int:
        """Ownership runs through the traveler; requires `traveler` to be loaded."""
        return self.traveler.user_id

    @property
    def is_requested(self) -> bool:
        return self.status == TripRequestStatus.REQUESTED.value
