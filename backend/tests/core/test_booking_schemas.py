"""Tests for booking request/response schemas."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from pydantic import ValidationError
import pytest

from marketplace.schemas.base_responses import PaginatedResponse
from marketplace.schemas.booking import (
    BookingCreate,
    BookingListQuery,
    BookingResponse,
    GuestInfo,
)


def _booking(**overrides):
    start = datetime(2030, 1, 15, 14, 0)
    data = dict(
        id="01ARZ3NDEKTSV4RRFFQ69G5FAV",
        customer_id=None,
        is_guest_booking=True,
        guest_first_name="Gina",
        guest_last_name="Guest",
        guest_email="gina@example.com",
        guest_phone=None,
        provider_id="provider",
        location_id="location",
        assigned_user_id=None,
        provider_user_id="membership",
        start_time=start,
        end_time=start + timedelta(hours=1),
        subtotal=Decimal("2300.00"),
        tax_amount=Decimal("287.50"),
        total_amount=Decimal("2587.50"),
        currency="JMD",
        status="PENDING",
        customer_notes=None,
        provider_notes=None,
        created_at=None,
        updated_at=None,
        confirmed_at=None,
        completed_at=None,
        cancelled_at=None,
        items=[],
        customer=None,
        provider=None,
        location=None,
        assigned_user=None,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


class TestBookingCreate:
    def test_times_normalized_to_utc(self):
        kingston = timezone(timedelta(hours=-5))
        request = BookingCreate(
            customerId="customer",
            providerId="provider",
            locationId="location",
            startTime=datetime(2030, 1, 15, 9, 0, tzinfo=kingston),
            endTime=datetime(2030, 1, 15, 10, 0, tzinfo=kingston),
            serviceIds=["service"],
        )

        assert request.start_time == datetime(2030, 1, 15, 14, 0, tzinfo=timezone.utc)

    def test_blank_notes_dropped(self):
        request = BookingCreate(
            customer_id="customer",
            provider_id="provider",
            location_id="location",
            start_time=datetime(2030, 1, 15, 14, 0, tzinfo=timezone.utc),
            end_time=datetime(2030, 1, 15, 15, 0, tzinfo=timezone.utc),
            service_ids=["service"],
            customer_notes="   ",
        )

        assert request.customer_notes is None

    def test_unknown_fields_forbidden(self):
        with pytest.raises(ValidationError):
            BookingCreate(
                customer_id="customer",
                provider_id="provider",
                location_id="location",
                start_time=datetime(2030, 1, 15, 14, 0, tzinfo=timezone.utc),
                end_time=datetime(2030, 1, 15, 15, 0, tzinfo=timezone.utc),
                service_ids=["service"],
                subtotal=1,
            )


class TestBookingResponse:
    def test_camel_case_and_float_money(self):
        response = BookingResponse.from_booking(_booking())

        data = response.model_dump(by_alias=True, mode="json")

        assert data["totalAmount"] == 2587.5
        assert data["taxAmount"] == 287.5
        assert data["providerMembershipId"] == "membership"
        assert data["guestInfo"]["email"] == "gina@example.com"
        assert data["startTime"].startswith("2030-01-15T14:00:00")

    def test_customer_booking_has_no_guest_info(self):
        response = BookingResponse.from_booking(
            _booking(customer_id="customer", is_guest_booking=False, guest_email=None)
        )

        assert response.guest_info is None
        assert response.start_time.tzinfo is not None

    def test_related_records_summarized(self):
        item = SimpleNamespace(
            id="item",
            service_id="service",
            service=SimpleNamespace(
                id="service", name="Haircut", duration=30, base_price=Decimal("1500.00")
            ),
            quantity=1,
            unit_price=Decimal("1500.00"),
            total=Decimal("1500.00"),
        )
        booking = _booking(
            items=[item],
            provider=SimpleNamespace(
                id="provider",
                business_name="Kingston Cuts",
                business_phone=None,
                business_email="hello@kingstoncuts.example",
                logo_url=None,
            ),
            assigned_user=SimpleNamespace(first_name="Sasha", last_name="Staff"),
        )

        data = BookingResponse.from_booking(booking).model_dump(by_alias=True, mode="json")

        assert data["provider"]["businessName"] == "Kingston Cuts"
        assert data["assignedUser"] == {"firstName": "Sasha", "lastName": "Staff"}
        assert data["items"][0]["service"]["basePrice"] == 1500.0
        assert data["location"] is None
        assert data["customer"] is None


class TestGuestInfo:
    def test_email_case_preserved(self):
        guest = GuestInfo(first_name="Gina", last_name="Guest", email=" Gina.Guest@Example.COM ")

        assert guest.email == "Gina.Guest@Example.COM"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            GuestInfo(first_name="Gina", last_name="Guest", email="not-an-email")


class TestPagination:
    def test_build_counts_pages(self):
        page = PaginatedResponse[int].build([1, 2], total=5, page=2, limit=2)

        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is True

    def test_empty_result(self):
        page = PaginatedResponse[int].build([], total=0, page=1, limit=20)

        assert page.total_pages == 0
        assert page.has_next is False

    def test_query_offset(self):
        assert BookingListQuery(page=3, limit=10).offset == 20

    def test_limit_capped(self):
        with pytest.raises(ValidationError):
            BookingListQuery(limit=1000)
