"""
Traveler management

Admin-only writes. A traveler and its owning user are created, and
updated, as one unit: both halves land in a single commit or neither does.
Travelers are never hard-deleted; "delete" deactivates them.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import HasPendingDependentsError, NotFoundError, ValidationError
from app.core.pagination import Page
from app.core.security import get_password_hash
from app.models.traveler import Traveler
from app.models.user import User
from app.schemas.traveler import TravelerCreate, TravelerUpdate
from app.services.authorization import Actor, authorize, can_manage_traveler, can_view_traveler
from app.services.filters import ListParams, TravelerFilters, run_listing, traveler_load_options, traveler_query
from app.services.integrity import ensure_traveler_deactivatable, is_email_conflict

logger = logging.getLogger(__name__)


def email_taken() -> ValidationError:
    return ValidationError.single("email", "unique", "This email is already in use.")


class TravelerService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, traveler_id: int) -> Traveler:
        stmt = (
            select(Traveler)
            .options(*traveler_load_options())
            .where(Traveler.id == traveler_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        traveler = result.scalar_one_or_none()
        if not traveler:
            raise NotFoundError("Traveler", traveler_id)
        return traveler

    async def get_for_actor(self, actor: Actor, traveler_id: int) -> Traveler:
        traveler = await self.get(traveler_id)
        authorize(can_view_traveler(actor, traveler))
        return traveler

    async def list(self, actor: Actor, filters: TravelerFilters, params: ListParams) -> Page:
        return await run_listing(self.db, traveler_query(actor, filters), params, options=traveler_load_options())

    async def create(self, actor: Actor, data: TravelerCreate) -> Traveler:
        """Create a login user together with its traveler profile."""
        authorize(can_manage_traveler(actor))

        if await self._email_in_use(data.email):
            raise email_taken()

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            is_admin=data.is_admin,
        )
        traveler = Traveler(name=data.name, user=user, is_active=data.is_active)
        self.db.add_all([user, traveler])
        await self._commit_unit()

        logger.info("Traveler %s created with user %s by admin %s", traveler.id, user.id, actor.id)
        return await self.get(traveler.id)

    async def update(self, actor: Actor, traveler_id: int, data: TravelerUpdate) -> Traveler:
        """Update a traveler and its owning user in one commit."""
        traveler = await self.get(traveler_id)
        authorize(can_manage_traveler(actor, traveler))
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        user = traveler.user

        if changes.get("is_active") is False and traveler.is_active:
            await self._ensure_deactivatable(traveler)

        if "email" in changes and changes["email"] != user.email:
            if await self._email_in_use(changes["email"], exclude_user_id=user.id):
                raise email_taken()
            user.email = changes["email"]

        if "name" in changes:
            traveler.name = changes["name"]
            user.name = changes["name"]

        if "is_active" in changes:
            traveler.is_active = changes["is_active"]

        if "password" in changes:
            user.hashed_password = get_password_hash(changes["password"])

        if "is_admin" in changes:
            user.is_admin = changes["is_admin"]

        await self._commit_unit()
        return await self.get(traveler.id)

    async def deactivate(self, actor: Actor, traveler_id: int) -> Traveler:
        """Soft delete, refused while the traveler has pending trip requests."""
        traveler = await self.get(traveler_id)
        authorize(can_manage_traveler(actor, traveler))

        await self._ensure_deactivatable(traveler)
        traveler.is_active = False
        await self.db.commit()
        logger.info("Traveler %s deactivated by admin %s", traveler.id, actor.id)
        return await self.get(traveler.id)

    async def restore(self, actor: Actor, traveler_id: int) -> Traveler:
        traveler = await self.get(traveler_id)
        authorize(can_manage_traveler(actor, traveler))

        traveler.is_active = True
        await self.db.commit()
        logger.info("Traveler %s restored by admin %s", traveler.id, actor.id)
        return await self.get(traveler.id)

    async def _ensure_deactivatable(self, traveler: Traveler) -> None:
        try:
            await ensure_traveler_deactivatable(self.db, traveler.id)
        except HasPendingDependentsError as exc:
            logger.warning("Refused to deactivate traveler %s: %s pending trip requests", traveler.id, exc.count)
            raise

    async def _email_in_use(self, email: str, exclude_user_id: int = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _commit_unit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if is_email_conflict(exc):
                raise email_taken()
            raise
