from sqlalchemy import Column, Integer, String, DateTime, Index
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.datetime_utils import utcnow

class Destination(Base):
    __tablename__ = "destinations"
    __table_args__ = (
        Index("ix_destinations_country_state_city", "country", "state", "city"),
    )

    id = Column(Integer, primary_key=True, index=True)

    city = Column(String(255), nullable=False)
    state = Column(String(255), nullable=True)
    country = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    trip_requests = relationship("TripRequest", back_populates="destination", passive_deletes=True)

    @property
    def full_location(self) -> str:
        return format_location(self.city, self.state, self.country)


def format_location(city, state, country) -> str:
    """`city[, state], country`"""
    parts = [city]
    if state:
        parts.append(state)
    parts.append(country)
    return ", ".join(parts)
