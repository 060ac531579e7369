# backend/marketplace/schemas/booking.py
"""
Booking schemas for the service marketplace.

Request models accept camelCase (wire) or snake_case names. Timestamps are
normalized to UTC on the way in. Money is never accepted from clients; it
only appears on responses.
"""

from datetime import datetime
from typing import Any, List, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import Field, field_validator

from ..core.constants import (
    DEFAULT_PAGE_SIZE,
    GUEST_PHONE_PATTERN,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_PAGE_SIZE,
)
from ..core.timezone_utils import ensure_utc
from ..models.booking import BookingStatus
from ._strict_base import StrictRequestModel
from .base import CamelModel, Money, StandardizedModel
from .base_responses import PaginatedResponse


def _strip_note(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    cleaned = v.strip()
    return cleaned or None


class GuestInfo(StrictRequestModel):
    """Contact details for a booking made without an account."""

    first_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    email: str = Field(..., max_length=255, description="Contact email, stored as submitted")
    phone: Optional[str] = Field(
        None,
        pattern=GUEST_PHONE_PATTERN,
        description="Phone number in international format",
    )

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        # Validate only; the normalized form would not match later lookups
        cleaned = v.strip()
        try:
            validate_email(cleaned, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return cleaned


class BookingCreate(StrictRequestModel):
    """
    Create a booking for either a registered customer or a guest.

    Exactly one of ``customer_id`` / ``guest_info`` must be supplied; that rule
    is enforced by the booking service so it surfaces as a 400.
    """

    customer_id: Optional[str] = Field(None, description="Registered customer making the booking")
    guest_info: Optional[GuestInfo] = Field(None, description="Contact details for guests")
    provider_id: str = Field(..., description="Provider being booked")
    location_id: str = Field(..., description="Provider location where the service happens")
    assigned_user_id: Optional[str] = Field(None, description="Team member performing the service")
    provider_membership_id: Optional[str] = Field(
        None, description="Membership record used for assignment bookkeeping"
    )
    start_time: datetime
    end_time: datetime
    service_ids: List[str] = Field(..., description="Services to book, in display order")
    customer_notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_validator("customer_notes")
    @classmethod
    def _clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_note(v)


class BookingUpdate(StrictRequestModel):
    """Partial update; only fields present in the request are applied."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    customer_notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)
    assigned_user_id: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("customer_notes")
    @classmethod
    def _clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_note(v)


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus
    provider_notes: Optional[str] = Field(None, max_length=MAX_NOTES_LENGTH)

    @field_validator("provider_notes")
    @classmethod
    def _clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_note(v)


class BookingAssign(StrictRequestModel):
    assigned_user_id: str = Field(..., min_length=1)


class BookingListQuery(CamelModel):
    """Filters and pagination for booking listings."""

    status: Optional[BookingStatus] = None
    location_id: Optional[str] = None
    assigned_user_id: Optional[str] = None
    start_date: Optional[datetime] = Field(None, description="Only bookings starting at/after")
    end_date: Optional[datetime] = Field(None, description="Only bookings ending at/before")
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("start_date", "end_date")
    @classmethod
    def _to_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# Responses


class ProviderSummary(StandardizedModel):
    """Business contact details shown alongside a booking."""

    id: str
    business_name: str
    business_phone: Optional[str] = None
    business_email: Optional[str] = None
    logo_url: Optional[str] = None


class LocationSummary(StandardizedModel):
    id: str
    name: str
    address: str
    city: Optional[str] = None
    parish: Optional[str] = None


class ServiceSummary(StandardizedModel):
    id: str
    name: str
    duration: int = Field(description="Minutes")
    base_price: Money


class CustomerSummary(StandardizedModel):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None


class AssignedUserSummary(StandardizedModel):
    first_name: str
    last_name: str


def _summary(schema: Any, record: Any) -> Any:
    return schema.model_validate(record) if record is not None else None


class BookingItemResponse(StandardizedModel):
    id: str
    service_id: str
    service: Optional[ServiceSummary] = None
    quantity: int
    unit_price: Money
    total: Money

    @classmethod
    def from_item(cls, item: Any) -> "BookingItemResponse":
        return cls(
            id=item.id,
            service_id=item.service_id,
            service=_summary(ServiceSummary, item.service),
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
        )


class GuestInfoResponse(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class BookingResponse(StandardizedModel):
    """Booking with its items, as returned by every booking endpoint."""

    id: str
    customer_id: Optional[str] = None
    customer: Optional[CustomerSummary] = None
    is_guest_booking: bool
    guest_info: Optional[GuestInfoResponse] = None
    provider_id: str
    location_id: str
    assigned_user_id: Optional[str] = None
    provider: Optional[ProviderSummary] = None
    location: Optional[LocationSummary] = None
    assigned_user: Optional[AssignedUserSummary] = None
    provider_membership_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    subtotal: Money
    tax_amount: Money
    total_amount: Money
    currency: str
    status: BookingStatus
    customer_notes: Optional[str] = None
    provider_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: List[BookingItemResponse] = Field(default_factory=list)

    @classmethod
    def from_booking(cls, booking: Any) -> "BookingResponse":
        """Create BookingResponse from a Booking ORM model."""
        guest_info = None
        if booking.is_guest_booking:
            guest_info = GuestInfoResponse(
                first_name=booking.guest_first_name,
                last_name=booking.guest_last_name,
                email=booking.guest_email,
                phone=booking.guest_phone,
            )

        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            is_guest_booking=bool(booking.is_guest_booking),
            customer=_summary(CustomerSummary, booking.customer),
            guest_info=guest_info,
            provider_id=booking.provider_id,
            location_id=booking.location_id,
            assigned_user_id=booking.assigned_user_id,
            provider=_summary(ProviderSummary, booking.provider),
            location=_summary(LocationSummary, booking.location),
            assigned_user=_summary(AssignedUserSummary, booking.assigned_user),
            provider_membership_id=booking.provider_user_id,
            start_time=ensure_utc(booking.start_time),
            end_time=ensure_utc(booking.end_time),
            subtotal=booking.subtotal,
            tax_amount=booking.tax_amount,
            total_amount=booking.total_amount,
            currency=booking.currency,
            status=booking.status,
            customer_notes=booking.customer_notes,
            provider_notes=booking.provider_notes,
            created_at=ensure_utc(booking.created_at),
            updated_at=ensure_utc(booking.updated_at),
            confirmed_at=ensure_utc(booking.confirmed_at),
            completed_at=ensure_utc(booking.completed_at),
            cancelled_at=ensure_utc(booking.cancelled_at),
            items=[BookingItemResponse.from_item(item) for item in booking.items],
        )


class BookingListResponse(PaginatedResponse[BookingResponse]):
    """Paginated bookings for customer and provider listings."""
