# backend/marketplace/repositories/__init__.py
"""
Repository Pattern Implementation for the marketplace backend.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- IRepository: Interface defining required methods for all repositories
- RepositoryFactory: Factory for creating repository instances
- BookingRepository: Bookings, items and filtered listings
- CatalogRepository: Read-only catalog lookups used during validation
- ProviderUserRepository: Active provider membership lookups

Usage:
    from marketplace.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    bookings = repository.get_guest_bookings("guest@example.com")
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingQueryFilters, BookingRepository
from .catalog_repository import CatalogRepository
from .factory import RepositoryFactory
from .provider_user_repository import ProviderUserRepository

__all__ = [
    "BaseRepository",
    "BookingQueryFilters",
    "BookingRepository",
    "CatalogRepository",
    "IRepository",
    "ProviderUserRepository",
    "RepositoryFactory",
]
