"""
Database models for the service marketplace.

The models are organized by functionality:
- Users (read-only, owned by the identity provider)
- Provider tenancy: providers, locations, memberships
- Service catalog (read-only for the booking engine)
- Bookings and their line items
"""

from .booking import Booking, BookingItem, BookingStatus, Currency
from .provider import Location, Provider, ProviderLocation, ProviderUser
from .service import Service
from .user import User

__all__ = [
    "Booking",
    "BookingItem",
    "BookingStatus",
    "Currency",
    "Location",
    "Provider",
    "ProviderLocation",
    "ProviderUser",
    "Service",
    "User",
]
