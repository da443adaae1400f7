"""
Shared response envelopes
"""

from pydantic import BaseModel
from typing import Generic, List, TypeVar

T = TypeVar("T")

# Ids are BIGINT-sized at most; larger values cannot name a row
MAX_ID = 2**63 - 1

class PageMeta(BaseModel):
    page: int
    per_page: int
    total: int
    last_page: int

class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta

class MessageResponse(BaseModel):
    message: str

class ValuesResponse(BaseModel):
    data: List[str]
