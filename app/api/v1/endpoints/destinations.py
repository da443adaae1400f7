"""
Destination API Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_db
from app.schemas.common import MAX_ID, MessageResponse, PaginatedResponse, ValuesResponse
from app.schemas.destination import DestinationCreate, DestinationResponse, DestinationUpdate
from app.services.authorization import Actor
from app.services.destinations import DestinationService
from app.services.filters import DestinationFilters, ListParams

router = APIRouter()

@router.get("", response_model=PaginatedResponse[DestinationResponse])
async def list_destinations(
    search: Optional[str] = Query(None, description="Matches city, state or country"),
    country: Optional[str] = None,
    state: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    all_: bool = Query(False, alias="all"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    List destinations, ordered by country then city
    """
    filters = DestinationFilters(search=search, country=country, state=state)
    result = await DestinationService(db).list(filters, ListParams(page=page, per_page=per_page, all=all_))
    return {"data": result.items, "meta": result.meta()}

@router.get("/countries", response_model=ValuesResponse)
async def list_countries(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Distinct countries in the catalog
    """
    return {"data": await DestinationService(db).countries()}

@router.get("/states", response_model=ValuesResponse)
async def list_states(
    country: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Distinct states, optionally within one country
    """
    return {"data": await DestinationService(db).states(country)}

@router.post("", response_model=DestinationResponse, status_code=status.HTTP_201_CREATED)
async def create_destination(
    payload: DestinationCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a destination (admin only)
    """
    return await DestinationService(db).create(actor, payload)

@router.get("/{destination_id}", response_model=DestinationResponse)
async def get_destination(
    destination_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a destination with its trip request count
    """
    service = DestinationService(db)
    destination = await service.get(destination_id)
    count = await service.trip_requests_count(destination)
    return DestinationResponse.model_validate(destination).model_copy(update={"trip_requests_count": count})

@router.patch("/{destination_id}", response_model=DestinationResponse)
async def update_destination(
    payload: DestinationUpdate,
    destination_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a destination (admin only)
    """
    return await DestinationService(db).update(actor, destination_id, payload)

@router.delete("/{destination_id}", response_model=MessageResponse)
async def delete_destination(
    destination_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a destination (admin only); refused while trip requests reference it
    """
    await DestinationService(db).delete(actor, destination_id)
    return {"message": "Destination deleted successfully."}
