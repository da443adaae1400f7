"""
Trip request notifications

The lifecycle engine emits a TripRequestStatusChanged event once a status
write is committed. A NotificationDispatcher consumes it after the response
is produced; delivery failures are logged and never reach the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import UserNotification
from app.models.trip_request import TripRequestStatus

logger = logging.getLogger(__name__)

STATUS_MESSAGES: Dict[str, str] = {
    TripRequestStatus.APPROVED.value: "Your trip request to {destination} has been approved.",
    TripRequestStatus.CANCELLED.value: "Your trip request to {destination} has been cancelled.",
}


@dataclass(frozen=True)
class TripRequestStatusChanged:
    trip_request_id: int
    user_id: int
    destination: str
    old_status: str
    new_status: str


def render_message(event: TripRequestStatusChanged) -> Optional[str]:
    """Message for the owning user, or None when the new status has no template."""
    template = STATUS_MESSAGES.get(event.new_status)
    if template is None:
        return None
    return template.format(destination=event.destination)


class NotificationDispatcher(ABC):
    @abstractmethod
    async def deliver(self, event: TripRequestStatusChanged) -> None: ...

    async def dispatch(self, event: TripRequestStatusChanged) -> None:
        """Fire-and-forget wrapper around `deliver`."""
        try:
            await self.deliver(event)
        except Exception:
            logger.exception(
                "Notification delivery failed",
                extra={"trip_request_id": event.trip_request_id, "new_status": event.new_status},
            )


class DatabaseNotificationDispatcher(NotificationDispatcher):
    """Stores the message as a UserNotification row, in its own session."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory

    async def deliver(self, event: TripRequestStatusChanged) -> None:
        message = render_message(event)
        if message is None:
            logger.debug("No notification template for status %s", event.new_status)
            return

        async with self.session_factory() as session:
            session.add(UserNotification(user_id=event.user_id, message=message, is_checked=False))
            await session.commit()

        logger.info(
            "Notified user %s: trip request %s %s -> %s",
            event.user_id, event.trip_request_id, event.old_status, event.new_status,
        )


async def count_unread(db: AsyncSession, user_id: int) -> int:
    stmt = select(func.count(UserNotification.id)).where(
        and_(
            UserNotification.user_id == user_id,
            UserNotification.is_checked == False
        )
    )
    result = await db.execute(stmt)
    return result.scalar() or 0
