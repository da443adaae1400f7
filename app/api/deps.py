"""
FastAPI Dependencies
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import async_session
from app.core.exceptions import AuthenticationError
from app.core.security import decode_token
from app.models.user import User
from app.services.authorization import Actor
from app.services.notifications import DatabaseNotificationDispatcher, NotificationDispatcher

bearer_scheme = HTTPBearer(auto_error=False)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Resolve the bearer credential to a user row, or fail with 401"""
    if credentials is None:
        raise AuthenticationError()

    payload = decode_token(credentials.credentials)
    user = await db.get(User, int(payload["sub"]))
    if user is None:
        raise AuthenticationError("Could not validate credentials.")
    return user

async def get_current_actor(user: User = Depends(get_current_user)) -> Actor:
    """The admin flag is read from the user row, so a demotion takes effect immediately"""
    return Actor(id=user.id, is_admin=bool(user.is_admin))

def get_notification_dispatcher() -> NotificationDispatcher:
    """Notification sink dependency"""
    return DatabaseNotificationDispatcher(async_session)
