"""
Authentication API Endpoints
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.api.deps import get_current_user, get_db
from app.core.exceptions import ValidationError
from app.core.security import (
    access_token_ttl_seconds,
    create_access_token,
    get_password_hash,
    verify_password,
)
from app.models.traveler import Traveler
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.user import (
    CurrentUserResponse,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserSummary,
)
from app.services.integrity import is_email_conflict
from app.services.notifications import count_unread

logger = logging.getLogger(__name__)

router = APIRouter()

def token_response(user: User) -> TokenResponse:
    return TokenResponse(
        user=UserSummary.model_validate(user),
        access_token=create_access_token(user.id, user.is_admin),
        expires_in=access_token_ttl_seconds()
    )

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new (non-admin) user together with their own traveler profile
    """
    result = await db.execute(select(User.id).where(User.email == payload.email))
    if result.scalar_one_or_none():
        raise ValidationError.single("email", "unique", "The email has already been taken.")

    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
        is_admin=False
    )
    db.add_all([user, Traveler(name=payload.name, user=user, is_active=True)])

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if is_email_conflict(exc):
            raise ValidationError.single("email", "unique", "The email has already been taken.")
        raise

    logger.info("User %s registered", user.id)
    return token_response(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    payload: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange email and password for a bearer credential
    """
    result = await db.execute(select(User).where(User.email == payload.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(payload.password, user.hashed_password):
        logger.info("Failed login attempt for %s", payload.email)
        raise ValidationError.single("email", "credentials", "The provided credentials are incorrect.")

    return token_response(user)

@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user)):
    """
    Credentials are stateless; the client discards its token
    """
    logger.info("User %s logged out", user.id)
    return {"message": "Successfully logged out"}

@router.post("/refresh", response_model=TokenResponse)
async def refresh(user: User = Depends(get_current_user)):
    """
    Issue a fresh credential for the authenticated user
    """
    return token_response(user)

@router.get("/user", response_model=CurrentUserResponse)
async def current_user(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Return the authenticated actor
    """
    unread = await count_unread(db, user.id)
    response = UserResponse.model_validate(user).model_copy(update={"unread_notifications_count": unread})
    return {"user": response}
