# backend/marketplace/models/provider.py
"""
Provider tenancy models.

A Provider is a business tenant. It operates from one or more Locations
(linked through ProviderLocation) and is staffed by users through
ProviderUser memberships that carry per-tenant capability flags.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Provider(Base):
    """A business tenant offering bookable services."""

    __tablename__ = "providers"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    business_name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    business_phone = Column(String(20), nullable=True)
    business_email = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    memberships = relationship("ProviderUser", back_populates="provider")
    location_links = relationship("ProviderLocation", back_populates="provider")
    services = relationship("Service", back_populates="provider")

    def __repr__(self) -> str:
        return f"<Provider {self.id}: {self.business_name}>"


class Location(Base):
    """A physical place a provider can operate from."""

    __tablename__ = "locations"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    name = Column(String(200), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=True)
    parish = Column(String(50), nullable=True)
    country = Column(String(100), nullable=False, default="Jamaica")
    timezone = Column(String(50), nullable=False, default="America/Jamaica")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Location {self.id}: {self.name}>"


class ProviderLocation(Base):
    """Links a provider to a location it operates from."""

    __tablename__ = "provider_locations"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    provider_id = Column(String(26), ForeignKey("providers.id"), nullable=False)
    location_id = Column(String(26), ForeignKey("locations.id"), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    provider = relationship("Provider", back_populates="location_links")
    location = relationship("Location")

    __table_args__ = (
        UniqueConstraint("provider_id", "location_id", name="uq_provider_locations_pair"),
    )


class ProviderUser(Base):
    """
    Membership of a user in a provider's team.

    Capability flags are scoped to this provider only; a person may hold
    memberships in several providers with different flags.
    """

    __tablename__ = "provider_users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    provider_id = Column(String(26), ForeignKey("providers.id"), nullable=False)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    title = Column(String(100), nullable=True)

    is_owner = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    can_manage_bookings = Column(Boolean, nullable=False, default=True)
    can_manage_services = Column(Boolean, nullable=False, default=False)
    can_manage_locations = Column(Boolean, nullable=False, default=False)
    can_view_analytics = Column(Boolean, nullable=False, default=False)

    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    provider = relationship("Provider", back_populates="memberships")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("provider_id", "user_id", name="uq_provider_users_pair"),
        Index("ix_provider_users_user_active", "user_id", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProviderUser {self.id}: provider={self.provider_id}, user={self.user_id}, "
            f"owner={self.is_owner}, active={self.is_active}>"
        )
