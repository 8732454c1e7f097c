"""
Shared response envelope and pagination schemas.
"""

from math import ceil
from typing import Generic, List, Optional, TypeVar

from fastapi import Request
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapped around every API payload."""
    success: bool = True
    message: str = "OK"
    data: Optional[T] = None
    path: str


class PaginationMeta(BaseModel):
    """Pagination metadata."""
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PaginatedData(BaseModel, Generic[T]):
    """Generic paginated payload."""
    items: List[T]
    pagination: PaginationMeta


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    """Build pagination metadata for a page of `limit` items out of `total`."""
    total_pages = ceil(total / limit) if total > 0 else 0
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def envelope(request: Request, data=None, message: str = "OK") -> dict:
    """Wrap a payload in the success envelope."""
    return {
        "success": True,
        "message": message,
        "data": data,
        "path": request.url.path,
    }
