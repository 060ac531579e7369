# backend/marketplace/services/booking_service.py
"""
Booking Service for the service marketplace.

Handles the booking lifecycle:
- Validating and creating bookings with their line items atomically
- Assigning bookings to provider team members
- Driving status transitions (confirm, complete, cancel, no-show)
- Partial updates by customers and team members
- Customer, provider and guest listings

Overlapping bookings for the same assignee or location are not prevented,
and status/assignment updates carry no version check (last write wins).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
import logging
from typing import List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from ..core.exceptions import InvalidStateException, NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc
from ..models.booking import Booking, BookingStatus
from ..models.service import Service
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingQueryFilters, BookingRepository
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.provider_user_repository import ProviderUserRepository
from ..schemas.booking import (
    BookingCreate,
    BookingListQuery,
    BookingStatusUpdate,
    BookingUpdate,
    GuestInfo,
)
from .base import BaseService
from .booking_authorization import BookingAuthorizationService
from .notification_service import NotificationService
from .pricing_service import PriceBreakdown, PricingService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifiedParty:
    """Booking made by a registered customer."""

    customer_id: str


@dataclass(frozen=True)
class GuestParty:
    """Booking made by an anonymous guest."""

    info: GuestInfo


BookingParty = Union[IdentifiedParty, GuestParty]


@dataclass(frozen=True)
class BookingPage:
    """One page of bookings plus the counts needed to build a paginated response."""

    items: List[Booking]
    total: int
    page: int
    limit: int


def resolve_party(customer_id: Optional[str], guest_info: Optional[GuestInfo]) -> BookingParty:
    """Turn the two optional request fields into exactly one party."""
    if customer_id and guest_info is not None:
        raise ValidationException(
            "Cannot provide both customerId and guestInfo", code="AMBIGUOUS_PARTY"
        )
    if customer_id:
        return IdentifiedParty(customer_id=customer_id)
    if guest_info is not None:
        return GuestParty(info=guest_info)
    raise ValidationException(
        "Either customerId or guestInfo must be provided", code="MISSING_PARTY"
    )


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Creation is async so the confirmation can be dispatched on the running
    loop once the booking has committed; every other operation is sync and
    is run off the loop by the routes.
    """

    repository: BookingRepository
    catalog_repository: CatalogRepository
    provider_user_repository: ProviderUserRepository

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        pricing_service: Optional[PricingService] = None,
        authorization: Optional[BookingAuthorizationService] = None,
        repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_booking_repository(db)
        self.catalog_repository = RepositoryFactory.create_catalog_repository(db)
        self.provider_user_repository = RepositoryFactory.create_provider_user_repository(db)
        self.notification_service = notification_service or NotificationService()
        self.pricing_service = pricing_service or PricingService()
        self.authorization = authorization or BookingAuthorizationService(
            db, provider_user_repository=self.provider_user_repository
        )

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @BaseService.measure_operation("create_booking")
    async def create_booking(self, booking_data: BookingCreate) -> Booking:
        """
        Create a PENDING booking with one item per requested service.

        The booking and its items are committed together or not at all. The
        confirmation is dispatched only after commit and its failure never
        affects the result.

        Raises:
            ValidationException: bad party, references, services or time window
            ServiceException: persistence failed (nothing was written)
        """
        booking = await asyncio.to_thread(self._create_booking_record, booking_data)
        try:
            self.notification_service.dispatch_booking_confirmation(str(booking.id))
        except Exception as e:
            # The booking is already committed
            prometheus_metrics.record_notification_outcome("failed")
            self.logger.error(
                "Could not dispatch confirmation for booking %s: %s", booking.id, e, exc_info=True
            )
        return booking

    def _create_booking_record(self, booking_data: BookingCreate) -> Booking:
        party = resolve_party(booking_data.customer_id, booking_data.guest_info)
        self._validate_time_window(booking_data.start_time, booking_data.end_time)
        self._validate_party(party)
        self._validate_location(booking_data.provider_id, booking_data.location_id)
        self._validate_staffing(booking_data)
        services = self._resolve_services(booking_data.provider_id, booking_data.service_ids)
        pricing = self.pricing_service.price_services(services)

        self.logger.info(
            "Creating booking for provider %s (%s party, %d services)",
            booking_data.provider_id,
            "guest" if isinstance(party, GuestParty) else "customer",
            len(services),
        )

        with self.transaction():
            booking = self.repository.create(
                **self._party_columns(party),
                provider_id=booking_data.provider_id,
                location_id=booking_data.location_id,
                assigned_user_id=booking_data.assigned_user_id,
                provider_user_id=booking_data.provider_membership_id,
                start_time=booking_data.start_time,
                end_time=booking_data.end_time,
                subtotal=pricing.subtotal,
                tax_amount=pricing.tax_amount,
                total_amount=pricing.total_amount,
                currency=pricing.currency,
                status=BookingStatus.PENDING.value,
                customer_notes=booking_data.customer_notes,
            )
            self._create_items(booking, pricing)

        prometheus_metrics.inc_booking_created(
            party="guest" if isinstance(party, GuestParty) else "customer",
            currency=pricing.currency,
        )
        self.logger.info(
            "Booking %s created (total %s %s)", booking.id, pricing.total_amount, pricing.currency
        )
        return booking

    def _create_items(self, booking: Booking, pricing: PriceBreakdown) -> None:
        for position, line in enumerate(pricing.lines):
            self.repository.create_item(
                booking,
                service_id=line.service_id,
                position=position,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.total,
            )

    @staticmethod
    def _party_columns(party: BookingParty) -> dict[str, object]:
        if isinstance(party, IdentifiedParty):
            return {"customer_id": party.customer_id, "is_guest_booking": False}
        return {
            "customer_id": None,
            "is_guest_booking": True,
            "guest_first_name": party.info.first_name,
            "guest_last_name": party.info.last_name,
            "guest_email": str(party.info.email),
            "guest_phone": party.info.phone,
        }

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_time_window(start_time: Optional[datetime], end_time: Optional[datetime]) -> None:
        start = ensure_utc(start_time)
        end = ensure_utc(end_time)
        if start is None or end is None or end <= start:
            raise ValidationException(
                "End time must be after start time",
                code="INVALID_TIME_WINDOW",
                details={
                    "start_time": start.isoformat() if start else None,
                    "end_time": end.isoformat() if end else None,
                },
            )

    def _validate_party(self, party: BookingParty) -> None:
        if isinstance(party, IdentifiedParty) and not self.catalog_repository.user_exists(
            party.customer_id
        ):
            raise ValidationException("Customer not found", code="CUSTOMER_NOT_FOUND")

    def _validate_location(self, provider_id: str, location_id: str) -> None:
        if self.catalog_repository.get_active_provider_location(provider_id, location_id) is None:
            raise ValidationException(
                "Invalid location for this provider", code="INVALID_LOCATION"
            )

    def _validate_staffing(self, booking_data: BookingCreate) -> None:
        if booking_data.assigned_user_id and not self.provider_user_repository.is_active_member(
            booking_data.provider_id, booking_data.assigned_user_id
        ):
            raise ValidationException(
                "Invalid assigned user for this provider", code="INVALID_ASSIGNED_USER"
            )
        if booking_data.provider_membership_id and (
            self.provider_user_repository.get_active_membership_by_id(
                booking_data.provider_id, booking_data.provider_membership_id
            )
            is None
        ):
            raise ValidationException(
                "Invalid provider user for this provider", code="INVALID_PROVIDER_USER"
            )

    def _resolve_services(self, provider_id: str, service_ids: Sequence[str]) -> List[Service]:
        """Active provider services in request order; any miss or duplicate is rejected."""
        if not service_ids:
            raise ValidationException(
                "At least one service is required", code="NO_SERVICES_SELECTED"
            )
        services = self.catalog_repository.get_active_services_for_provider(
            provider_id, service_ids
        )
        if len(services) != len(service_ids):
            raise ValidationException(
                "Some services are invalid",
                code="INVALID_SERVICES",
                details={"requested": len(service_ids), "resolved": len(services)},
            )
        by_id = {str(service.id): service for service in services}
        return [by_id[service_id] for service_id in service_ids]

    def _get_booking_or_404(self, booking_id: str) -> Booking:
        booking = self.repository.get_booking_with_items(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    def _require_active_member(self, provider_id: str, user_id: str) -> None:
        if not self.provider_user_repository.is_active_member(provider_id, user_id):
            raise ValidationException(
                "User is not part of this provider", code="NOT_PROVIDER_MEMBER"
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @BaseService.measure_operation("assign_booking")
    def assign_booking(self, booking_id: str, assigned_user_id: str, actor: User) -> Booking:
        """
        Assign a booking to a team member of its provider.

        Only ``assigned_user_id`` changes; status is left untouched.

        Raises:
            NotFoundException: unknown booking
            ForbiddenException: actor is not an owner or booking manager
            ValidationException: target is not an active member of the provider
        """
        booking = self._get_booking_or_404(booking_id)
        capabilities = self.authorization.resolve_capabilities(actor.id, booking.provider_id)
        self.authorization.require_manager(capabilities)
        self._require_active_member(booking.provider_id, assigned_user_id)

        with self.transaction():
            booking.assigned_user_id = assigned_user_id
            self.repository.flush()

        self.db.expire(booking, ["assigned_user"])
        self.logger.info("Booking %s assigned to %s by %s", booking.id, assigned_user_id, actor.id)
        return booking

    @BaseService.measure_operation("update_booking_status")
    def update_booking_status(
        self, booking_id: str, actor: User, status_update: BookingStatusUpdate
    ) -> Booking:
        """
        Set a booking's status (owner or booking manager only).

        Adjacency between states is not enforced; the one hard rule is that a
        booking already in a terminal state cannot be cancelled.
        """
        booking = self._get_booking_or_404(booking_id)
        capabilities = self.authorization.resolve_capabilities(actor.id, booking.provider_id)
        self.authorization.require_manager(capabilities)

        new_status = BookingStatus(status_update.status)
        if new_status == BookingStatus.CANCELLED and booking.is_terminal:
            raise InvalidStateException(
                f"Booking cannot be cancelled - current status: {booking.status}",
                current_status=str(booking.status),
            )

        with self.transaction():
            if booking.status != new_status.value:
                booking.apply_status(new_status)
                prometheus_metrics.inc_booking_status_change(new_status.value)
            if status_update.provider_notes is not None:
                booking.provider_notes = status_update.provider_notes
            self.repository.flush()

        return booking

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: str, actor: User) -> Booking:
        """
        Cancel a booking on behalf of its customer or any provider team member.

        Raises:
            NotFoundException: unknown booking
            ForbiddenException: actor is neither the customer nor a team member
            InvalidStateException: booking already completed, cancelled or no-show
        """
        booking = self._get_booking_or_404(booking_id)
        capabilities = self.authorization.resolve_capabilities(actor.id, booking.provider_id)
        self.authorization.ensure_can_cancel(booking, actor.id, capabilities)

        if not booking.is_cancellable:
            raise InvalidStateException(
                f"Booking cannot be cancelled - current status: {booking.status}",
                current_status=str(booking.status),
            )

        with self.transaction():
            booking.cancel()
            self.repository.flush()

        prometheus_metrics.inc_booking_status_change(BookingStatus.CANCELLED.value)
        return booking

    @BaseService.measure_operation("update_booking")
    def update_booking(self, booking_id: str, actor: User, update_data: BookingUpdate) -> Booking:
        """
        Partially update time window, notes or assignee.

        Any active team member may update; the owning customer only while the
        booking is pending or confirmed.
        """
        booking = self._get_booking_or_404(booking_id)
        capabilities = self.authorization.resolve_capabilities(actor.id, booking.provider_id)
        self.authorization.ensure_can_update(booking, actor.id, capabilities)

        changes = update_data.model_dump(exclude_unset=True)
        if "start_time" in changes or "end_time" in changes:
            self._validate_time_window(
                changes.get("start_time") or booking.start_time,
                changes.get("end_time") or booking.end_time,
            )
        if changes.get("assigned_user_id"):
            self._require_active_member(booking.provider_id, changes["assigned_user_id"])

        if not changes:
            return booking

        with self.transaction():
            for field, value in changes.items():
                if field in ("start_time", "end_time") and value is None:
                    continue
                setattr(booking, field, value)
            self.repository.flush()

        if "assigned_user_id" in changes:
            self.db.expire(booking, ["assigned_user"])

        self.logger.info("Booking %s updated by %s: %s", booking.id, actor.id, sorted(changes))
        return booking

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def _to_filters(query: BookingListQuery) -> BookingQueryFilters:
        return BookingQueryFilters(
            status=BookingStatus(query.status) if query.status else None,
            location_id=query.location_id,
            assigned_user_id=query.assigned_user_id,
            start_date=query.start_date,
            end_date=query.end_date,
        )

    @BaseService.measure_operation("get_customer_bookings")
    def get_customer_bookings(
        self, actor: User, query: BookingListQuery
    ) -> BookingPage:
        """The actor's own bookings, soonest first."""
        bookings, total = self.repository.get_customer_bookings(
            actor.id, self._to_filters(query), offset=query.offset, limit=query.limit
        )
        return BookingPage(items=bookings, total=total, page=query.page, limit=query.limit)

    @BaseService.measure_operation("get_provider_bookings")
    def get_provider_bookings(
        self, provider_id: str, actor: User, query: BookingListQuery
    ) -> BookingPage:
        """
        A provider's bookings, soonest first.

        Members without management rights only see bookings assigned to them.
        """
        capabilities = self.authorization.require_member(
            self.authorization.resolve_capabilities(actor.id, provider_id)
        )
        bookings, total = self.repository.get_provider_bookings(
            provider_id,
            self._to_filters(query),
            offset=query.offset,
            limit=query.limit,
            restrict_to_assignee=self.authorization.provider_listing_scope(capabilities),
        )
        return BookingPage(items=bookings, total=total, page=query.page, limit=query.limit)

    @BaseService.measure_operation("get_guest_bookings")
    def get_guest_bookings(self, email: Optional[str]) -> List[Booking]:
        """All guest bookings made with ``email``, most recent start first."""
        if not email or not email.strip():
            raise ValidationException("Email is required", code="EMAIL_REQUIRED")
        return self.repository.get_guest_bookings(email.strip())

    @BaseService.measure_operation("get_booking")
    def get_booking(self, booking_id: str, email: Optional[str] = None) -> Booking:
        """
        Single booking by id.

        A supplied email must match the guest email of a guest booking.
        """
        booking = self._get_booking_or_404(booking_id)
        self.authorization.ensure_guest_access(booking, email)
        return booking

