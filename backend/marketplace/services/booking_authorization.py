# backend/marketplace/services/booking_authorization.py
"""
Authorization rules for booking operations.

An actor's standing within a provider is resolved once per request into an
immutable ``Capabilities`` value; the guard methods below only inspect that
value and the booking, they never query storage themselves.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, InvalidStateException
from ..models.booking import CUSTOMER_EDITABLE_STATUSES, Booking, BookingStatus
from ..models.provider import ProviderUser
from ..repositories.factory import RepositoryFactory
from ..repositories.provider_user_repository import ProviderUserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capabilities:
    """An actor's active membership flags within one provider."""

    provider_id: str
    user_id: str
    membership_id: str
    is_owner: bool
    can_manage_bookings: bool

    @classmethod
    def from_membership(cls, membership: ProviderUser) -> "Capabilities":
        return cls(
            provider_id=str(membership.provider_id),
            user_id=str(membership.user_id),
            membership_id=str(membership.id),
            is_owner=bool(membership.is_owner),
            can_manage_bookings=bool(membership.can_manage_bookings),
        )

    @property
    def can_manage(self) -> bool:
        """Owners and booking managers may assign bookings and set their status."""
        return self.is_owner or self.can_manage_bookings


class BookingAuthorizationService(BaseService):
    """Resolves capabilities and enforces who may read or modify a booking."""

    def __init__(
        self,
        db: Session,
        provider_user_repository: Optional[ProviderUserRepository] = None,
    ):
        super().__init__(db)
        self.provider_user_repository = (
            provider_user_repository or RepositoryFactory.create_provider_user_repository(db)
        )

    def resolve_capabilities(self, actor_id: str, provider_id: str) -> Optional[Capabilities]:
        """Capabilities of ``actor_id`` in ``provider_id``; None without an active membership."""
        membership = self.provider_user_repository.get_active_membership(provider_id, actor_id)
        if membership is None:
            return None
        return Capabilities.from_membership(membership)

    # Guards

    @staticmethod
    def require_member(capabilities: Optional[Capabilities]) -> Capabilities:
        if capabilities is None:
            raise ForbiddenException()
        return capabilities

    @staticmethod
    def require_manager(capabilities: Optional[Capabilities]) -> Capabilities:
        """Assign / set-status gate: owner or ``can_manage_bookings``."""
        if capabilities is None or not capabilities.can_manage:
            raise ForbiddenException()
        return capabilities

    @staticmethod
    def provider_listing_scope(capabilities: Capabilities) -> Optional[str]:
        """
        Assignee restriction for provider listings.

        Members without management rights only ever see bookings assigned to
        themselves; None means the full provider listing.
        """
        if capabilities.can_manage:
            return None
        return capabilities.user_id

    @staticmethod
    def ensure_can_cancel(
        booking: Booking, actor_id: str, capabilities: Optional[Capabilities]
    ) -> None:
        if booking.customer_id == actor_id or capabilities is not None:
            return
        raise ForbiddenException()

    @staticmethod
    def ensure_can_update(
        booking: Booking, actor_id: str, capabilities: Optional[Capabilities]
    ) -> None:
        """
        Any active team member may update; the owning customer only while the
        booking is still pending or confirmed.
        """
        if capabilities is not None:
            return
        if booking.customer_id is not None and booking.customer_id == actor_id:
            if BookingStatus(booking.status) not in CUSTOMER_EDITABLE_STATUSES:
                raise InvalidStateException(
                    "Booking can no longer be modified", current_status=str(booking.status)
                )
            return
        raise ForbiddenException()

    @staticmethod
    def ensure_guest_access(booking: Booking, email: Optional[str]) -> None:
        """A supplied email must match a guest booking's contact email exactly."""
        if not booking.is_guest_booking or not email:
            return
        if booking.guest_email != email.strip():
            raise ForbiddenException()
