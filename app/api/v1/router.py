"""
API Router
"""

from fastapi import APIRouter
from app.api.v1.endpoints import auth, trip_requests, travelers, destinations, notifications

api_router = APIRouter()

api_router.include_router(
    auth.router,
    tags=["auth"]
)

api_router.include_router(
    trip_requests.router,
    prefix="/trip-requests",
    tags=["trip-requests"]
)

api_router.include_router(
    travelers.router,
    prefix="/travelers",
    tags=["travelers"]
)

api_router.include_router(
    destinations.router,
    prefix="/destinations",
    tags=["destinations"]
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["notifications"]
)
