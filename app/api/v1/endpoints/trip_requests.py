"""
Trip Request API Endpoints
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_db, get_notification_dispatcher
from app.models.trip_request import TripRequestStatus
from app.schemas.common import MAX_ID, MessageResponse, PaginatedResponse
from app.schemas.trip_request import (
    TripRequestCreate,
    TripRequestResponse,
    TripRequestStatusUpdate,
    TripRequestUpdate
)
from app.services.authorization import Actor
from app.services.filters import ListParams, TripRequestFilters
from app.services.notifications import NotificationDispatcher
from app.services.trip_requests import TripRequestService

router = APIRouter()

@router.get("", response_model=PaginatedResponse[TripRequestResponse])
async def list_trip_requests(
    status_filter: Optional[TripRequestStatus] = Query(None, alias="status"),
    destination_id: Optional[int] = Query(None, le=MAX_ID),
    destination: Optional[str] = Query(None, description="Matches city, state or country"),
    traveler_id: Optional[int] = Query(None, le=MAX_ID),
    search: Optional[str] = Query(None, description="Matches description or traveler name"),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    all_: bool = Query(False, alias="all"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    List trip requests; non-admins only ever see their own
    """
    filters = TripRequestFilters(
        status=status_filter.value if status_filter else None,
        destination_id=destination_id,
        destination=destination,
        traveler_id=traveler_id,
        search=search,
        start_date=start_date,
        end_date=end_date
    )
    result = await TripRequestService(db).list(actor, filters, ListParams(page=page, per_page=per_page, all=all_))
    return {"data": result.items, "meta": result.meta()}

@router.post("", response_model=TripRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_trip_request(
    payload: TripRequestCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    File a new trip request
    """
    return await TripRequestService(db).create(actor, payload)

@router.get("/{trip_request_id}", response_model=TripRequestResponse)
async def get_trip_request(
    trip_request_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Get a specific trip request
    """
    return await TripRequestService(db).get_for_actor(actor, trip_request_id)

@router.patch("/{trip_request_id}", response_model=TripRequestResponse)
async def update_trip_request(
    payload: TripRequestUpdate,
    trip_request_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Owner edit, only while the request is still pending
    """
    return await TripRequestService(db).update(actor, trip_request_id, payload)

@router.delete("/{trip_request_id}", response_model=MessageResponse)
async def cancel_trip_request(
    trip_request_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Owner cancel, only while the request is still pending
    """
    await TripRequestService(db).cancel(actor, trip_request_id)
    return {"message": "Trip request cancelled successfully"}

@router.patch("/{trip_request_id}/status", response_model=TripRequestResponse)
async def update_trip_request_status(
    payload: TripRequestStatusUpdate,
    background_tasks: BackgroundTasks,
    trip_request_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher)
):
    """
    Admin decision; the owner is notified after the response is sent
    """
    trip_request, event = await TripRequestService(db).change_status(actor, trip_request_id, payload.status)

    if event is not None:
        background_tasks.add_task(dispatcher.dispatch, event)

    return trip_request
