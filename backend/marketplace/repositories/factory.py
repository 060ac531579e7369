# backend/marketplace/repositories/factory.py
"""
Repository Factory for the marketplace backend.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .catalog_repository import CatalogRepository
    from .provider_user_repository import ProviderUserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_catalog_repository(db: Session) -> "CatalogRepository":
        """Create repository for catalog reads."""
        from .catalog_repository import CatalogRepository

        return CatalogRepository(db)

    @staticmethod
    def create_provider_user_repository(db: Session) -> "ProviderUserRepository":
        """Create repository for provider membership lookups."""
        from .provider_user_repository import ProviderUserRepository

        return ProviderUserRepository(db)
