"""
Pagination helpers shared by the list endpoints.
"""
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.config import settings


@dataclass
class Page:
    """A slice of rows plus the descriptor the client needs to page on."""
    items: List[Any]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        if self.total == 0 or self.per_page == 0:
            return 1
        return (self.total + self.per_page - 1) // self.per_page

    def meta(self) -> dict:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "last_page": self.last_page,
        }


def clamp_per_page(per_page: Optional[int]) -> int:
    if per_page is None:
        return settings.DEFAULT_PAGE_SIZE
    return max(1, min(settings.MAX_PAGE_SIZE, per_page))


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    per_page: Optional[int] = None,
    options=(),
) -> Page:
    """
    Apply pagination to a SQLAlchemy query.

    The count runs over the unordered, unpaged query; the page itself keeps
    whatever ordering the caller put on `query`. Loader `options` only
    apply to the page fetch.
    """
    page = max(1, page)
    per_page = clamp_per_page(per_page)

    count_stmt = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    page_query = query.options(*options).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(page_query)
    return Page(items=list(result.scalars().all()), total=total, page=page, per_page=per_page)


async def fetch_all(db: AsyncSession, query: Select) -> Page:
    """The `all=true` path: every row in one page."""
    result = await db.execute(query)
    items = list(result.scalars().all())
    return Page(items=items, total=len(items), page=1, per_page=len(items))
