"""
Notification API Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_actor, get_db
from app.core.exceptions import NotFoundError
from app.core.pagination import paginate
from app.models.notification import UserNotification
from app.schemas.common import MAX_ID, PaginatedResponse
from app.schemas.notification import NotificationResponse
from app.services.authorization import Actor, authorize, can_view_notification

router = APIRouter()

@router.get("", response_model=PaginatedResponse[NotificationResponse])
async def list_notifications(
    is_checked: Optional[bool] = None,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    The actor's own notifications, newest first
    """
    query = select(UserNotification).where(UserNotification.user_id == actor.id)

    if is_checked is not None:
        query = query.where(UserNotification.is_checked == is_checked)

    query = query.order_by(UserNotification.created_at.desc(), UserNotification.id.desc())
    result = await paginate(db, query, page=page, per_page=per_page)
    return {"data": result.items, "meta": result.meta()}

@router.patch("/{notification_id}/check", response_model=NotificationResponse)
async def check_notification(
    notification_id: int = Path(..., le=MAX_ID),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db)
):
    """
    Mark a notification as read
    """
    notification = await db.get(UserNotification, notification_id)
    if not notification:
        raise NotFoundError("Notification", notification_id)

    authorize(can_view_notification(actor, notification))

    notification.is_checked = True
    await db.commit()
    await db.refresh(notification)
    return notification
