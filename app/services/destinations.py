"""
Destination catalog

Anyone authenticated can read; only admins write. Deleting is a hard
delete, refused while any trip request still points at the destination.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import HasDependentsError, NotFoundError
from app.core.pagination import Page
from app.models.destination import Destination
from app.schemas.destination import DestinationCreate, DestinationUpdate
from app.services.authorization import Actor, authorize, can_manage_destination
from app.services.filters import DestinationFilters, ListParams, destination_query, run_listing
from app.services.integrity import count_destination_dependents, ensure_destination_deletable
from app.services.validators import merge_changes, validate_destination

logger = logging.getLogger(__name__)


class DestinationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, destination_id: int) -> Destination:
        destination = await self.db.get(Destination, destination_id, populate_existing=True)
        if not destination:
            raise NotFoundError("Destination", destination_id)
        return destination

    async def list(self, filters: DestinationFilters, params: ListParams) -> Page:
        return await run_listing(self.db, destination_query(filters), params)

    async def trip_requests_count(self, destination: Destination) -> int:
        return await count_destination_dependents(self.db, destination.id)

    async def create(self, actor: Actor, data: DestinationCreate) -> Destination:
        authorize(can_manage_destination(actor))
        values = data.model_dump()
        validate_destination(values)

        destination = Destination(**values)
        self.db.add(destination)
        await self.db.commit()
        await self.db.refresh(destination)

        logger.info("Destination %s (%s) created by admin %s", destination.id, destination.full_location, actor.id)
        return destination

    async def update(self, actor: Actor, destination_id: int, data: DestinationUpdate) -> Destination:
        destination = await self.get(destination_id)
        authorize(can_manage_destination(actor, destination))

        changes = data.model_dump(exclude_unset=True)
        current = {"city": destination.city, "state": destination.state, "country": destination.country}
        validate_destination(merge_changes(current, changes))

        for key, value in changes.items():
            setattr(destination, key, value)

        await self.db.commit()
        await self.db.refresh(destination)
        return destination

    async def delete(self, actor: Actor, destination_id: int) -> None:
        destination = await self.get(destination_id)
        authorize(can_manage_destination(actor, destination))

        try:
            await ensure_destination_deletable(self.db, destination.id)
        except HasDependentsError as exc:
            logger.warning("Refused to delete destination %s: %s trip requests", destination.id, exc.count)
            raise

        await self.db.delete(destination)
        await self.db.commit()
        logger.info("Destination %s deleted by admin %s", destination_id, actor.id)

    async def countries(self) -> List[str]:
        stmt = select(Destination.country).distinct().order_by(Destination.country.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def states(self, country: Optional[str] = None) -> List[str]:
        stmt = select(Destination.state).distinct().where(Destination.state.is_not(None))
        if country:
            stmt = stmt.where(Destination.country == country)
        result = await self.db.execute(stmt.order_by(Destination.state.asc()))
        return list(result.scalars().all())
