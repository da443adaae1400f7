"""Database models initialization."""

# Import all models to ensure they're registered with SQLAlchemy
from .user import User
from .traveler import Traveler
from .destination import Destination
from .trip_request import TripRequest, TripRequestStatus
from .notification import UserNotification

__all__ = [
    "User",
    "Traveler",
    "Destination",
    "TripRequest",
    "TripRequestStatus",
    "UserNotification"
]
