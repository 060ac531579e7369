# backend/marketplace/repositories/catalog_repository.py
"""
Catalog Repository for the marketplace backend.

Read-only lookups the booking engine needs when validating a request:
customers, provider/location links and active services.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.provider import ProviderLocation
from ..models.service import Service
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CatalogRepository(BaseRepository[Service]):
    """Repository for catalog reads (services, locations, users)."""

    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_user(self, user_id: str) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def user_exists(self, user_id: str) -> bool:
        return self.get_user(user_id) is not None

    def get_active_provider_location(
        self, provider_id: str, location_id: str
    ) -> Optional[ProviderLocation]:
        """Return the active link between a provider and a location, if any."""
        try:
            return (
                self.db.query(ProviderLocation)
                .filter(
                    ProviderLocation.provider_id == provider_id,
                    ProviderLocation.location_id == location_id,
                    ProviderLocation.is_active.is_(True),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error checking location {location_id} for provider {provider_id}: {str(e)}"
            )
            raise RepositoryException(f"Failed to check provider location: {str(e)}")

    def get_active_services_for_provider(
        self, provider_id: str, service_ids: Sequence[str]
    ) -> List[Service]:
        """
        Resolve ``service_ids`` to active services owned by ``provider_id``.

        Unknown, inactive or foreign ids are silently dropped; duplicate ids
        resolve to a single row. Callers compare counts to detect either.
        """
        if not service_ids:
            return []
        query = self._build_query().filter(
            Service.id.in_(list(service_ids)),
            Service.provider_id == provider_id,
            Service.is_active.is_(True),
        )
        return self._execute_query(query)
