"""
Query/Filter Layer

Builds the SELECTs behind the list endpoints. Role scoping is applied first,
from an explicitly passed actor; every other filter dimension is ANDed on
top. Within a free-text dimension the matched columns are ORed, with a
case-insensitive substring match.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from app.core.datetime_utils import to_naive_utc
from app.core.pagination import Page, fetch_all, paginate
from app.models.destination import Destination
from app.models.traveler import Traveler
from app.models.trip_request import TripRequest
from app.models.user import User
from app.services.authorization import Actor


@dataclass
class ListParams:
    page: int = 1
    per_page: Optional[int] = None
    all: bool = False


@dataclass
class TripRequestFilters:
    status: Optional[str] = None
    destination_id: Optional[int] = None
    destination: Optional[str] = None
    traveler_id: Optional[int] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class TravelerFilters:
    search: Optional[str] = None
    is_active: Optional[bool] = None


@dataclass
class DestinationFilters:
    search: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None


def trip_request_load_options():
    return (
        selectinload(TripRequest.traveler).selectinload(Traveler.user),
        selectinload(TripRequest.destination),
    )


def traveler_load_options():
    return (selectinload(Traveler.user),)


def trip_request_query(actor: Actor, filters: TripRequestFilters) -> Select:
    query = (
        select(TripRequest)
        .join(TripRequest.traveler)
        .join(TripRequest.destination)
    )

    if not actor.is_admin:
        query = query.where(Traveler.user_id == actor.id)

    if filters.status:
        query = query.where(TripRequest.status == filters.status)

    if filters.destination_id is not None:
        query = query.where(TripRequest.destination_id == filters.destination_id)

    if filters.destination:
        query = query.where(or_(
            Destination.city.icontains(filters.destination, autoescape=True),
            Destination.state.icontains(filters.destination, autoescape=True),
            Destination.country.icontains(filters.destination, autoescape=True),
        ))

    if filters.traveler_id is not None:
        query = query.where(TripRequest.traveler_id == filters.traveler_id)

    if filters.search:
        query = query.where(or_(
            TripRequest.description.icontains(filters.search, autoescape=True),
            Traveler.name.icontains(filters.search, autoescape=True),
        ))

    if filters.start_date is not None:
        query = query.where(TripRequest.departure_at >= to_naive_utc(filters.start_date))

    if filters.end_date is not None:
        query = query.where(TripRequest.departure_at <= to_naive_utc(filters.end_date))

    return query.order_by(TripRequest.departure_at.desc(), TripRequest.id.desc())


def traveler_query(actor: Actor, filters: TravelerFilters) -> Select:
    query = select(Traveler).join(Traveler.user)

    if not actor.is_admin:
        query = query.where(Traveler.user_id == actor.id)

    if filters.is_active is not None:
        query = query.where(Traveler.is_active == filters.is_active)

    if filters.search:
        query = query.where(or_(
            Traveler.name.icontains(filters.search, autoescape=True),
            User.email.icontains(filters.search, autoescape=True),
        ))

    return query.order_by(Traveler.created_at.desc(), Traveler.id.desc())


def destination_query(filters: DestinationFilters) -> Select:
    query = select(Destination)

    if filters.search:
        query = query.where(or_(
            Destination.city.icontains(filters.search, autoescape=True),
            Destination.state.icontains(filters.search, autoescape=True),
            Destination.country.icontains(filters.search, autoescape=True),
        ))

    if filters.country:
        query = query.where(Destination.country == filters.country)

    if filters.state:
        query = query.where(Destination.state == filters.state)

    return query.order_by(Destination.country.asc(), Destination.city.asc(), Destination.id.asc())


async def run_listing(db: AsyncSession, query: Select, params: ListParams, options=()) -> Page:
    if params.all:
        return await fetch_all(db, query.options(*options))
    return await paginate(db, query, page=params.page, per_page=params.per_page, options=options)
