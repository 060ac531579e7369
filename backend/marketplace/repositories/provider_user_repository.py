# backend/marketplace/repositories/provider_user_repository.py
"""
Provider membership Repository.

Membership lookups are always scoped to a single provider and only ever
return active memberships.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.provider import ProviderUser
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProviderUserRepository(BaseRepository[ProviderUser]):
    """Repository for provider team memberships."""

    def __init__(self, db: Session):
        super().__init__(db, ProviderUser)

    def get_active_membership(self, provider_id: str, user_id: str) -> Optional[ProviderUser]:
        """Active membership of ``user_id`` in ``provider_id``, if any."""
        return self.find_one_by(provider_id=provider_id, user_id=user_id, is_active=True)

    def get_active_membership_by_id(
        self, provider_id: str, membership_id: str
    ) -> Optional[ProviderUser]:
        """Active membership record ``membership_id`` belonging to ``provider_id``."""
        return self.find_one_by(id=membership_id, provider_id=provider_id, is_active=True)

    def is_active_member(self, provider_id: str, user_id: str) -> bool:
        return self.get_active_membership(provider_id, user_id) is not None
