# backend/marketplace/repositories/booking_repository.py
"""
Booking Repository for the marketplace backend.

Implements all data access operations for bookings and their items:
- Booking and item creation (flushed inside the caller's transaction)
- Single-booking lookups with items eager loaded
- Paginated, filtered listings for customers and providers
- Guest lookups by contact email
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Query, Session, joinedload, selectinload

from ..models.booking import Booking, BookingItem, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingQueryFilters:
    """Optional narrowing applied to booking listings."""

    status: Optional[BookingStatus] = None
    location_id: Optional[str] = None
    assigned_user_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        """Items with their services plus the records summarized in responses."""
        return query.options(
            selectinload(Booking.items).selectinload(BookingItem.service),
            joinedload(Booking.provider),
            joinedload(Booking.location),
            joinedload(Booking.customer),
            joinedload(Booking.assigned_user),
        )

    # Creation

    def create_item(self, booking: Booking, **kwargs: Any) -> BookingItem:
        """Create a line item attached to ``booking`` (flushed, not committed)."""
        item = BookingItem(booking_id=booking.id, **kwargs)
        booking.items.append(item)
        self.flush()
        return item

    # Lookups

    def get_booking_with_items(self, booking_id: str) -> Optional[Booking]:
        return self.get_by_id(booking_id, load_relationships=True)

    # Listings

    def get_customer_bookings(
        self,
        customer_id: str,
        filters: BookingQueryFilters,
        *,
        offset: int,
        limit: int,
    ) -> Tuple[List[Booking], int]:
        """
        Page through a customer's own bookings, earliest start first.

        Returns:
            (bookings on the requested page, total matching count)
        """
        query = self._build_query().filter(Booking.customer_id == customer_id)
        return self._paginate(self._apply_filters(query, filters), offset=offset, limit=limit)

    def get_provider_bookings(
        self,
        provider_id: str,
        filters: BookingQueryFilters,
        *,
        offset: int,
        limit: int,
        restrict_to_assignee: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """
        Page through a provider's bookings, earliest start first.

        When ``restrict_to_assignee`` is given the listing only contains
        bookings assigned to that user, regardless of other filters.
        """
        query = self._build_query().filter(Booking.provider_id == provider_id)
        query = self._apply_filters(query, filters)
        if restrict_to_assignee is not None:
            query = query.filter(Booking.assigned_user_id == restrict_to_assignee)
        return self._paginate(query, offset=offset, limit=limit)

    def get_guest_bookings(self, email: str) -> List[Booking]:
        """All guest bookings made with ``email`` (exact match), newest start first."""
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(Booking.is_guest_booking.is_(True), Booking.guest_email == email)
            .order_by(Booking.start_time.desc(), Booking.id.desc())
        )
        return self._execute_query(query)

    # Protected helpers

    def _apply_filters(self, query: Query, filters: BookingQueryFilters) -> Query:
        if filters.status is not None:
            query = query.filter(Booking.status == BookingStatus(filters.status).value)
        if filters.location_id:
            query = query.filter(Booking.location_id == filters.location_id)
        if filters.assigned_user_id:
            query = query.filter(Booking.assigned_user_id == filters.assigned_user_id)
        if filters.start_date is not None:
            query = query.filter(Booking.start_time >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(Booking.end_time <= filters.end_date)
        return query

    def _paginate(self, query: Query, *, offset: int, limit: int) -> Tuple[List[Booking], int]:
        total = self._execute_count(query)
        page_query = (
            self._apply_eager_loading(query)
            .order_by(Booking.start_time.asc(), Booking.id.asc())
            .offset(offset)
            .limit(limit)
        )
        return self._execute_query(page_query), total
