"""
Authorization Policy

Pure decision functions over (actor, entity). Nothing here touches the
database or reads request state: the actor is always passed in explicitly.
`authorize` turns a False decision into UnauthorizedError.
"""

from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import UnauthorizedError
from app.models.notification import UserNotification
from app.models.traveler import Traveler
from app.models.trip_request import TripRequest, TripRequestStatus


@dataclass(frozen=True)
class Actor:
    """The authenticated identity making a request."""
    id: int
    is_admin: bool = False


# Trip requests

def can_view_trip_request(actor: Actor, trip_request: TripRequest) -> bool:
    return actor.is_admin or trip_request.owning_user_id == actor.id


def can_edit_trip_request(actor: Actor, trip_request: TripRequest) -> bool:
    return (
        trip_request.owning_user_id == actor.id
        and trip_request.status == TripRequestStatus.REQUESTED.value
    )


def can_cancel_trip_request(actor: Actor, trip_request: TripRequest) -> bool:
    return can_edit_trip_request(actor, trip_request)


def can_change_status(actor: Actor, trip_request: Optional[TripRequest] = None) -> bool:
    return actor.is_admin


def is_trip_request_owner(actor: Actor, trip_request: TripRequest) -> bool:
    return trip_request.owning_user_id == actor.id


# Travelers

def can_view_traveler(actor: Actor, traveler: Traveler) -> bool:
    return actor.is_admin or traveler.user_id == actor.id


def can_manage_traveler(actor: Actor, traveler: Optional[Traveler] = None) -> bool:
    """Create, update, deactivate and restore."""
    return actor.is_admin


# Destinations

def can_manage_destination(actor: Actor, destination=None) -> bool:
    """Create, update and delete. Viewing is open to any authenticated actor."""
    return actor.is_admin


# Notifications

def can_view_notification(actor: Actor, notification: UserNotification) -> bool:
    return notification.user_id == actor.id


def authorize(allowed: bool, message: str = "This action is unauthorized.") -> None:
    if not allowed:
        raise UnauthorizedError(message)
