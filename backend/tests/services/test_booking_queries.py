"""Tests for booking listings and single-booking reads."""

from datetime import timedelta

import pytest

from marketplace.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from marketplace.models.booking import BookingStatus
from marketplace.schemas.booking import BookingListQuery


class TestCustomerBookings:
    def test_only_own_bookings_soonest_first(
        self, db, marketplace, booking_factory, booking_service, base_start
    ):
        later = booking_factory(start=base_start + timedelta(days=2))
        sooner = booking_factory(start=base_start)
        booking_factory(customer=marketplace.other_customer)

        page = booking_service.get_customer_bookings(marketplace.customer, BookingListQuery())

        assert page.total == 2
        assert [b.id for b in page.items] == [sooner.id, later.id]

    def test_pagination(self, db, marketplace, booking_factory, booking_service, base_start):
        for day in range(5):
            booking_factory(start=base_start + timedelta(days=day))

        page = booking_service.get_customer_bookings(
            marketplace.customer, BookingListQuery(page=2, limit=2)
        )

        assert page.total == 5
        assert page.page == 2
        assert page.limit == 2
        assert len(page.items) == 2

    def test_status_filter(self, db, marketplace, booking_factory, booking_service, base_start):
        booking_factory(status=BookingStatus.PENDING)
        confirmed = booking_factory(
            status=BookingStatus.CONFIRMED, start=base_start + timedelta(days=1)
        )

        page = booking_service.get_customer_bookings(
            marketplace.customer, BookingListQuery(status=BookingStatus.CONFIRMED)
        )

        assert [b.id for b in page.items] == [confirmed.id]


class TestProviderBookings:
    def test_manager_sees_everything(
        self, db, marketplace, booking_factory, booking_service, base_start
    ):
        booking_factory(assigned_to=marketplace.staff)
        booking_factory(assigned_to=marketplace.manager, start=base_start + timedelta(days=1))
        booking_factory(start=base_start + timedelta(days=2))
        booking_factory(
            provider=marketplace.other_provider,
            location=marketplace.unlinked_location,
            start=base_start + timedelta(days=3),
        )

        page = booking_service.get_provider_bookings(
            marketplace.provider.id, marketplace.manager, BookingListQuery()
        )

        assert page.total == 3

    def test_plain_member_only_sees_own_assignments(
        self, db, marketplace, booking_factory, booking_service, base_start
    ):
        mine = booking_factory(assigned_to=marketplace.staff)
        booking_factory(assigned_to=marketplace.manager, start=base_start + timedelta(days=1))
        booking_factory(start=base_start + timedelta(days=2))

        page = booking_service.get_provider_bookings(
            marketplace.provider.id, marketplace.staff, BookingListQuery()
        )

        assert page.total == 1
        assert [b.id for b in page.items] == [mine.id]

    def test_scope_overrides_assignee_filter(
        self, db, marketplace, booking_factory, booking_service
    ):
        booking_factory(assigned_to=marketplace.manager)

        page = booking_service.get_provider_bookings(
            marketplace.provider.id,
            marketplace.staff,
            BookingListQuery(assigned_user_id=marketplace.manager.id),
        )

        assert page.total == 0

    def test_date_window_filter(
        self, db, marketplace, booking_factory, booking_service, base_start
    ):
        booking_factory(start=base_start - timedelta(days=1))
        inside = booking_factory(start=base_start)
        booking_factory(start=base_start + timedelta(days=1))

        page = booking_service.get_provider_bookings(
            marketplace.provider.id,
            marketplace.owner,
            BookingListQuery(start_date=base_start, end_date=base_start + timedelta(hours=2)),
        )

        assert [b.id for b in page.items] == [inside.id]

    @pytest.mark.parametrize("actor_attr", ["outsider", "former_staff", "customer"])
    def test_non_members_forbidden(
        self, db, marketplace, booking_factory, booking_service, actor_attr
    ):
        booking_factory()

        with pytest.raises(ForbiddenException):
            booking_service.get_provider_bookings(
                marketplace.provider.id, getattr(marketplace, actor_attr), BookingListQuery()
            )


class TestGuestBookings:
    def test_exact_email_newest_first(
        self, db, marketplace, booking_factory, booking_service, base_start
    ):
        older = booking_factory(guest_email="gina@example.com")
        newer = booking_factory(
            guest_email="gina@example.com", start=base_start + timedelta(days=3)
        )
        booking_factory(guest_email="someone@example.com")
        booking_factory(guest_email="GINA@example.com", start=base_start + timedelta(days=5))

        bookings = booking_service.get_guest_bookings("gina@example.com")

        assert [b.id for b in bookings] == [newer.id, older.id]

    def test_customer_bookings_never_match(
        self, db, marketplace, booking_factory, booking_service
    ):
        booking_factory()

        assert booking_service.get_guest_bookings(marketplace.customer.email) == []

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_email_required(self, db, booking_service, email):
        with pytest.raises(ValidationException, match="Email is required"):
            booking_service.get_guest_bookings(email)


class TestGetBooking:
    def test_returns_booking_with_items(self, db, marketplace, booking_factory, booking_service):
        booking = booking_factory()

        found = booking_service.get_booking(booking.id)

        assert found.id == booking.id
        assert [item.service_id for item in found.items] == [marketplace.haircut.id]

    def test_guest_email_must_match(self, db, booking_factory, booking_service):
        booking = booking_factory(guest_email="gina@example.com")

        assert booking_service.get_booking(booking.id, "gina@example.com").id == booking.id
        with pytest.raises(ForbiddenException):
            booking_service.get_booking(booking.id, "intruder@example.com")

    def test_unknown_booking(self, db, booking_service):
        with pytest.raises(NotFoundException, match="Booking not found"):
            booking_service.get_booking("01ARZ3NDEKTSV4RRFFQ69G5FAV")
