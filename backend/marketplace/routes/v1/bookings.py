# backend/marketplace/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST / - Create a booking (customer or guest)
    GET / - Current user's bookings with filters and pagination
    GET /guest - Guest bookings by contact email
    GET /provider/{provider_id} - Provider bookings, scoped by role
    GET /{booking_id} - Booking details (guest email check when supplied)
    PATCH /{booking_id} - Update time window, notes or assignee
    PATCH /{booking_id}/status - Set booking status
    PATCH /{booking_id}/assign - Assign booking to a team member
    DELETE /{booking_id} - Cancel a booking
"""

import asyncio
from datetime import datetime
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path

from ...api.dependencies import get_booking_service, get_current_active_user
from ...core.config import settings
from ...core.exceptions import DomainException
from ...core.ulid_helper import ULID_PATH_PATTERN
from ...models.booking import BookingStatus
from ...models.user import User
from ...schemas.booking import (
    BookingAssign,
    BookingCreate,
    BookingListQuery,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from ...services.booking_service import BookingPage, BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def booking_list_query(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    location_id: Optional[str] = Query(None, alias="locationId"),
    assigned_user_id: Optional[str] = Query(None, alias="assignedUserId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(
        settings.bookings_default_page_size, ge=1, le=settings.bookings_max_page_size
    ),
) -> BookingListQuery:
    """Collect listing filters from the query string."""
    return BookingListQuery(
        status=status_filter,
        location_id=location_id,
        assigned_user_id=assigned_user_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )


def _page_response(result: BookingPage) -> BookingListResponse:
    return BookingListResponse.build(
        items=[BookingResponse.from_booking(booking) for booking in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


def _booking_id_path() -> Path:
    # No ULID pattern: any id that matches no booking is a 404
    return Path(..., description="Booking ULID", examples=["01HF4G12ABCDEF3456789XYZAB"])


# ============================================================================
# SECTION 1: Collection and static routes (before dynamic routes)
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a booking for a registered customer or a guest.

    Prices are derived from the provider's active services; the booking
    starts out PENDING and a confirmation is dispatched after commit.
    """
    try:
        booking = await booking_service.create_booking(booking_data)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=BookingListResponse)
async def get_my_bookings(
    query: BookingListQuery = Depends(booking_list_query),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """Bookings made by the current user, soonest first."""
    try:
        result = await asyncio.to_thread(
            booking_service.get_customer_bookings, current_user, query
        )
        return _page_response(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/guest", response_model=List[BookingResponse])
async def get_guest_bookings(
    email: Optional[str] = Query(None, description="Contact email used for the bookings"),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """Guest bookings made with ``email``, most recent first."""
    try:
        bookings = await asyncio.to_thread(booking_service.get_guest_bookings, email)
        return [BookingResponse.from_booking(booking) for booking in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/provider/{provider_id}", response_model=BookingListResponse)
async def get_provider_bookings(
    provider_id: str = Path(..., description="Provider ULID", pattern=ULID_PATH_PATTERN),
    query: BookingListQuery = Depends(booking_list_query),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    """
    Bookings for a provider.

    Owners and booking managers see every booking; other team members only
    see bookings assigned to them.
    """
    try:
        result = await asyncio.to_thread(
            booking_service.get_provider_bookings, provider_id, current_user, query
        )
        return _page_response(result)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Single-booking routes
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str = _booking_id_path(),
    email: Optional[str] = Query(None, description="Guest contact email"),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Get booking details; a supplied email must match the guest's."""
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id, email)
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    update_data: BookingUpdate,
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Update time window, notes or assignee."""
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking, booking_id, current_user, update_data
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    status_update: BookingStatusUpdate,
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Set booking status (owners and booking managers)."""
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking_status, booking_id, current_user, status_update
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/assign", response_model=BookingResponse)
async def assign_booking(
    assignment: BookingAssign,
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Assign a booking to an active team member of its provider."""
    try:
        booking = await asyncio.to_thread(
            booking_service.assign_booking,
            booking_id,
            assignment.assigned_user_id,
            current_user,
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str = _booking_id_path(),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a booking as its customer or a provider team member."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking, booking_id, current_user
        )
        return BookingResponse.from_booking(booking)
    except DomainException as e:
        handle_domain_exception(e)
