# backend/marketplace/models/booking.py
"""
Booking models for the service marketplace.

A Booking reserves a time window with a provider at one of its locations,
for either a registered customer or an anonymous guest. Each selected
service becomes a BookingItem carrying a price snapshot, so later catalog
price changes never alter historical bookings.
"""

from datetime import datetime
from enum import Enum
import logging
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Default on creation
    CONFIRMED = "CONFIRMED"  # Accepted by the provider
    COMPLETED = "COMPLETED"  # Service delivered
    CANCELLED = "CANCELLED"  # Cancelled by customer or provider
    NO_SHOW = "NO_SHOW"  # Customer didn't attend


TERMINAL_STATUSES = frozenset(
    {BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW}
)
CUSTOMER_EDITABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})


class Currency(str, Enum):
    JMD = "JMD"
    USD = "USD"


class Booking(Base):
    """
    Reservation of a time window with a provider.

    Exactly one party is set: ``customer_id`` for registered customers, or
    the ``guest_*`` columns for anonymous guests (``is_guest_booking``).
    Money columns are derived server-side at creation and never accepted
    from clients.
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)

    # Party
    customer_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    is_guest_booking = Column(Boolean, nullable=False, default=False)
    guest_first_name = Column(String(100), nullable=True)
    guest_last_name = Column(String(100), nullable=True)
    guest_email = Column(String(255), nullable=True, index=True)
    guest_phone = Column(String(20), nullable=True)

    # Tenancy
    provider_id = Column(String(26), ForeignKey("providers.id"), nullable=False, index=True)
    location_id = Column(String(26), ForeignKey("locations.id"), nullable=False)

    # Staffing
    assigned_user_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    provider_user_id = Column(String(26), ForeignKey("provider_users.id"), nullable=True)

    # Timing
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)

    # Money (derived)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=Currency.JMD.value)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    customer_notes = Column(Text, nullable=True)
    provider_notes = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    customer = relationship("User", foreign_keys=[customer_id])
    assigned_user = relationship("User", foreign_keys=[assigned_user_id])
    provider = relationship("Provider")
    location = relationship("Location")
    provider_membership = relationship("ProviderUser")
    items = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingItem.position",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        CheckConstraint("currency IN ('JMD', 'USD')", name="ck_bookings_currency"),
        CheckConstraint("end_time > start_time", name="check_time_order"),
        CheckConstraint("subtotal >= 0", name="check_subtotal_non_negative"),
        CheckConstraint("tax_amount >= 0", name="check_tax_non_negative"),
        CheckConstraint(
            "(customer_id IS NOT NULL AND guest_email IS NULL) OR "
            "(customer_id IS NULL AND guest_email IS NOT NULL)",
            name="check_single_party",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: provider={self.provider_id}, "
            f"customer={self.customer_id or self.guest_email}, "
            f"time={self.start_time}-{self.end_time}, status={self.status}>"
        )

    @property
    def is_terminal(self) -> bool:
        return BookingStatus(self.status) in TERMINAL_STATUSES

    @property
    def is_cancellable(self) -> bool:
        """Check if booking can be cancelled."""
        return not self.is_terminal

    def apply_status(self, new_status: BookingStatus, at: Optional[datetime] = None) -> None:
        """
        Move to ``new_status`` and stamp the matching lifecycle timestamp.

        Transition legality is checked by the booking service, not here.
        """
        at = at or utc_now()
        self.status = new_status.value
        if new_status == BookingStatus.CONFIRMED:
            self.confirmed_at = at
        elif new_status == BookingStatus.COMPLETED:
            self.completed_at = at
        elif new_status == BookingStatus.CANCELLED:
            self.cancelled_at = at
        logger.info(f"Booking {self.id} moved to {new_status.value}")

    def cancel(self) -> None:
        """Cancel this booking."""
        self.apply_status(BookingStatus.CANCELLED)


class BookingItem(Base):
    """One selected service within a booking, with its price snapshot."""

    __tablename__ = "booking_items"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    booking_id = Column(
        String(26), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="items")
    service = relationship("Service")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="check_item_price_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<BookingItem {self.id}: service={self.service_id} "
            f"x{self.quantity} @ {self.unit_price}>"
        )


Index(
    "ix_bookings_provider_start",
    Booking.provider_id,
    Booking.start_time,
)
