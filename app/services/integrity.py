"""
Referential-integrity guards

Pre-delete checks for destinations and travelers. The two entities have
different deletion policies, so each has its own guard: a destination is
hard-deleted only without any trip requests, a traveler is deactivated
only without pending ones.
"""

from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import HasDependentsError, HasPendingDependentsError
from app.models.trip_request import TripRequest, TripRequestStatus


async def count_destination_dependents(db: AsyncSession, destination_id: int) -> int:
    stmt = select(func.count(TripRequest.id)).where(TripRequest.destination_id == destination_id)
    result = await db.execute(stmt)
    return result.scalar() or 0


async def count_pending_traveler_dependents(db: AsyncSession, traveler_id: int) -> int:
    stmt = select(func.count(TripRequest.id)).where(
        and_(
            TripRequest.traveler_id == traveler_id,
            TripRequest.status == TripRequestStatus.REQUESTED.value
        )
    )
    result = await db.execute(stmt)
    return result.scalar() or 0


async def ensure_destination_deletable(db: AsyncSession, destination_id: int) -> None:
    count = await count_destination_dependents(db, destination_id)
    if count > 0:
        raise HasDependentsError("Destination", count)


async def ensure_traveler_deactivatable(db: AsyncSession, traveler_id: int) -> None:
    count = await count_pending_traveler_dependents(db, traveler_id)
    if count > 0:
        raise HasPendingDependentsError("Traveler", count)


def is_email_conflict(exc: IntegrityError) -> bool:
    """Whether a failed commit tripped the unique index on users.email."""
    # SQLite: "UNIQUE constraint failed: users.email"; Postgres names the key column
    return "email" in str(exc.orig).lower()
