"""
Trip Request Lifecycle Engine

States: requested (initial), approved, cancelled. Owners may edit or cancel
only while a request is `requested`; admins move it along the transition
allow-list below. Every status-guarded write is a compare-and-swap on
`status`, so an owner edit racing an admin decision cannot both win.
"""

import logging
from typing import Dict, FrozenSet, Optional, Tuple

from sqlalchemy import select, update, delete, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.datetime_utils import convert_timezone_aware_datetimes
from app.core.exceptions import (
    InvalidStateTransitionError,
    NoActiveTravelerProfileError,
    NotFoundError,
    Violation,
)
from app.core.pagination import Page
from app.models.destination import Destination
from app.models.traveler import Traveler
from app.models.trip_request import TripRequest, TripRequestStatus
from app.schemas.trip_request import TripRequestCreate, TripRequestUpdate
from app.services.authorization import (
    Actor,
    authorize,
    can_change_status,
    can_edit_trip_request,
    can_cancel_trip_request,
    can_view_trip_request,
    is_trip_request_owner,
)
from app.services.filters import (
    ListParams,
    TripRequestFilters,
    run_listing,
    trip_request_load_options,
    trip_request_query,
)
from app.services.notifications import TripRequestStatusChanged
from app.services.validators import (
    raise_if_any,
    trip_schedule_violations,
    trip_schedule_update_violations,
)

logger = logging.getLogger(__name__)

REQUESTED = TripRequestStatus.REQUESTED.value
APPROVED = TripRequestStatus.APPROVED.value
CANCELLED = TripRequestStatus.CANCELLED.value

# Admin transitions. Terminal states map to nothing.
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    REQUESTED: frozenset({APPROVED, CANCELLED}),
    APPROVED: frozenset({CANCELLED}),
    CANCELLED: frozenset(),
}

EDITABLE_FIELDS = ("destination_id", "description", "departure_at", "return_at")


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class TripRequestService:
    """
    Create, read, update, cancel and approve trip requests for an actor
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, trip_request_id: int) -> TripRequest:
        stmt = (
            select(TripRequest)
            .options(*trip_request_load_options())
            .where(TripRequest.id == trip_request_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        trip_request = result.scalar_one_or_none()
        if not trip_request:
            raise NotFoundError("TripRequest", trip_request_id)
        return trip_request

    async def get_for_actor(self, actor: Actor, trip_request_id: int) -> TripRequest:
        trip_request = await self.get(trip_request_id)
        authorize(can_view_trip_request(actor, trip_request))
        return trip_request

    async def list(self, actor: Actor, filters: TripRequestFilters, params: ListParams) -> Page:
        return await run_listing(
            self.db,
            trip_request_query(actor, filters),
            params,
            options=trip_request_load_options(),
        )

    async def create(self, actor: Actor, data: TripRequestCreate) -> TripRequest:
        """
        File a new request in the `requested` state.

        Admins may file for any traveler by passing traveler_id; everyone
        else files for their own active traveler profile.
        """
        values = convert_timezone_aware_datetimes(data.model_dump())
        on_behalf = actor.is_admin and values.get("traveler_id") is not None

        violations = []
        if not await self._destination_exists(values["destination_id"]):
            violations.append(Violation("destination_id", "exists", "The selected destination does not exist."))
        if on_behalf and not await self._traveler_exists(values["traveler_id"]):
            violations.append(Violation("traveler_id", "exists", "The selected traveler does not exist."))
        violations.extend(trip_schedule_violations(values["departure_at"], values["return_at"], True))
        raise_if_any(violations)

        if on_behalf:
            traveler_id = values["traveler_id"]
        else:
            traveler = await self._active_traveler_for(actor.id)
            if traveler is None:
                raise NoActiveTravelerProfileError()
            traveler_id = traveler.id

        trip_request = TripRequest(
            traveler_id=traveler_id,
            destination_id=values["destination_id"],
            description=values.get("description"),
            departure_at=values["departure_at"],
            return_at=values["return_at"],
            status=REQUESTED,
        )
        self.db.add(trip_request)
        await self.db.commit()

        logger.info("Trip request %s filed by user %s for traveler %s", trip_request.id, actor.id, traveler_id)
        return await self.get(trip_request.id)

    async def update(self, actor: Actor, trip_request_id: int, data: TripRequestUpdate) -> TripRequest:
        trip_request = await self.get(trip_request_id)
        self._ensure_owner_mutable(actor, trip_request, can_edit_trip_request, "update")

        changes = convert_timezone_aware_datetimes(data.model_dump(exclude_unset=True))
        changes = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}

        violations = []
        if "destination_id" in changes:
            if changes["destination_id"] is None:
                violations.append(Violation("destination_id", "required", "The destination is required."))
            elif not await self._destination_exists(changes["destination_id"]):
                violations.append(Violation("destination_id", "exists", "The selected destination does not exist."))
        violations.extend(trip_schedule_update_violations(
            {"departure_at": trip_request.departure_at, "return_at": trip_request.return_at},
            {k: v for k, v in changes.items() if k in ("departure_at", "return_at")},
        ))
        raise_if_any(violations)

        if not changes:
            return trip_request

        await self._compare_and_swap(
            update(TripRequest)
            .where(and_(TripRequest.id == trip_request.id, TripRequest.status == REQUESTED))
            .values(**changes),
            current_status=trip_request.status,
        )
        return await self.get(trip_request.id)

    async def cancel(self, actor: Actor, trip_request_id: int) -> None:
        """Owner-initiated cancel: removes a still-pending request."""
        trip_request = await self.get(trip_request_id)
        self._ensure_owner_mutable(actor, trip_request, can_cancel_trip_request, "cancel")

        await self._compare_and_swap(
            delete(TripRequest)
            .where(and_(TripRequest.id == trip_request.id, TripRequest.status == REQUESTED)),
            current_status=trip_request.status,
        )
        self.db.expunge(trip_request)
        logger.info("Trip request %s cancelled by owner %s", trip_request_id, actor.id)

    async def change_status(
        self,
        actor: Actor,
        trip_request_id: int,
        new_status: TripRequestStatus,
    ) -> Tuple[TripRequest, Optional[TripRequestStatusChanged]]:
        """
        Admin decision on a request.

        Returns the updated request and, when the status actually changed,
        the event to hand to the notification dispatcher. The event is only
        built after the write is committed.
        """
        trip_request = await self.get(trip_request_id)
        authorize(can_change_status(actor, trip_request))

        old_status = trip_request.status
        target = TripRequestStatus(new_status).value

        if old_status == target:
            return trip_request, None

        if not can_transition(old_status, target):
            raise InvalidStateTransitionError(
                f"Cannot change trip request status from {old_status} to {target}.",
                current_status=old_status,
                target_status=target,
            )

        owner_id = trip_request.owning_user_id
        destination = trip_request.destination.full_location

        await self._compare_and_swap(
            update(TripRequest)
            .where(and_(TripRequest.id == trip_request.id, TripRequest.status == old_status))
            .values(status=target),
            current_status=old_status,
        )
        logger.info("Trip request %s status %s -> %s by admin %s", trip_request.id, old_status, target, actor.id)

        event = TripRequestStatusChanged(
            trip_request_id=trip_request.id,
            user_id=owner_id,
            destination=destination,
            old_status=old_status,
            new_status=target,
        )
        return await self.get(trip_request.id), event

    # Internals

    @staticmethod
    def _ensure_owner_mutable(actor: Actor, trip_request: TripRequest, predicate, action: str) -> None:
        if predicate(actor, trip_request):
            return
        authorize(is_trip_request_owner(actor, trip_request))
        raise InvalidStateTransitionError(
            f"Cannot {action} trip request with current status.",
            current_status=trip_request.status,
        )

    async def _compare_and_swap(self, stmt, current_status: str) -> None:
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount != 1:
            await self.db.rollback()
            raise InvalidStateTransitionError(
                "Trip request status changed concurrently; reload and try again.",
                current_status=current_status,
            )
        await self.db.commit()

    async def _destination_exists(self, destination_id: int) -> bool:
        result = await self.db.execute(select(Destination.id).where(Destination.id == destination_id))
        return result.scalar_one_or_none() is not None

    async def _traveler_exists(self, traveler_id: int) -> bool:
        result = await self.db.execute(select(Traveler.id).where(Traveler.id == traveler_id))
        return result.scalar_one_or_none() is not None

    async def _active_traveler_for(self, user_id: int) -> Optional[Traveler]:
        stmt = (
            select(Traveler)
            .where(and_(Traveler.user_id == user_id, Traveler.is_active == True))
            .order_by(Traveler.id.asc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
