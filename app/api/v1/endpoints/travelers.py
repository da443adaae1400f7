"""
Traveler API Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_db
from app.schemas.common import MAX_ID, MessageResponse, PaginatedResponse
from app.schemas.traveler import TravelerCreate, TravelerResponse, TravelerUpdate
from app.services.authorization import Actor
from app.services.filters import ListParams, TravelerFilters
from app.services.travelers import TravelerService

router = APIRouter()

@router.get("", response_model=PaginatedResponse[TravelerResponse])
async def list_travelers(
    search: Optional[str] = Query(None, description="Matches traveler name or owner email"),
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    all_: bool = Query(False, alias="all"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    List travelers; non-admins only see their own profiles
    """
    filters = TravelerFilters(search=search, is_active=is_active)
    result = await TravelerService(db).list(actor, filters, ListParams(page=page, per_page=per_page, all=all_))
    return {"data": result.items, "meta": result.meta()}

@router.post("", response_model=TravelerResponse, status_code=status.HTTP_201_CREATED)
async def create_traveler(
    payload: TravelerCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a traveler together with its login user (admin only)
    """
    return await TravelerService(db).create(actor, payload)

@router.get("/{traveler_id}", response_model=TravelerResponse)
async def get_traveler(
    traveler_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a traveler; non-admins may only view their own
    """
    return await TravelerService(db).get_for_actor(actor, traveler_id)

@router.patch("/{traveler_id}", response_model=TravelerResponse)
async def update_traveler(
    payload: TravelerUpdate,
    traveler_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a traveler and its login user (admin only)
    """
    return await TravelerService(db).update(actor, traveler_id, payload)

@router.delete("/{traveler_id}", response_model=MessageResponse)
async def deactivate_traveler(
    traveler_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate a traveler (admin only); refused while trip requests are pending
    """
    await TravelerService(db).deactivate(actor, traveler_id)
    return {"message": "Traveler deactivated successfully."}

@router.patch("/{traveler_id}/restore", response_model=TravelerResponse)
async def restore_traveler(
    traveler_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Reactivate a traveler (admin only)
    """
    return await TravelerService(db).restore(actor, traveler_id)
