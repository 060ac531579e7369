# backend/marketplace/schemas/__init__.py
"""
Pydantic schemas for the marketplace API.
"""

from .base import CamelModel, Money, StandardizedModel
from .base_responses import PaginatedResponse
from .booking import (
    BookingAssign,
    BookingCreate,
    BookingItemResponse,
    BookingListQuery,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
    GuestInfo,
    GuestInfoResponse,
)

__all__ = [
    "BookingAssign",
    "BookingCreate",
    "BookingItemResponse",
    "BookingListQuery",
    "BookingListResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    "BookingUpdate",
    "CamelModel",
    "GuestInfo",
    "GuestInfoResponse",
    "Money",
    "PaginatedResponse",
    "StandardizedModel",
]
