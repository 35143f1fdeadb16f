"""
Pagination envelope shared by list endpoints
"""

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class PaginationInfo(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationInfo":
        total_pages = math.ceil(total / limit) if limit > 0 else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class PaginatedResult(BaseModel, Generic[T]):
    data: List[T]
    pagination: PaginationInfo

    class Config:
        alias_generator = to_camel
        populate_by_name = True
