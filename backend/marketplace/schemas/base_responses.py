"""
Base response schemas for standardized API responses.

These schemas ensure consistent response formats across all list endpoints.
"""

from math import ceil
from typing import Generic, List, TypeVar

from pydantic import ConfigDict, Field

from .base import CamelModel

T = TypeVar("T")


class PaginatedResponse(CamelModel, Generic[T]):
    """
    Standard paginated response for all list endpoints.

    ``total_pages`` is ``ceil(total / limit)``; an empty result has zero pages.
    """

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of items", ge=0)
    page: int = Field(default=1, description="Current page number (1-indexed)", ge=1)
    limit: int = Field(default=20, description="Items per page", ge=1)
    total_pages: int = Field(description="Number of pages", ge=0)
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": ["..."],
                "total": 45,
                "page": 1,
                "limit": 20,
                "totalPages": 3,
                "hasNext": True,
                "hasPrev": False,
            }
        }
    )

    @classmethod
    def build(cls, items: List[T], *, total: int, page: int, limit: int) -> "PaginatedResponse[T]":
        total_pages = ceil(total / limit) if limit else 0
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
