# backend/marketplace/models/service.py
"""Bookable services offered by a provider (read-only for the booking engine)."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    provider_id = Column(String(26), ForeignKey("providers.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="JMD")
    duration = Column(Integer, nullable=False)  # minutes
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    provider = relationship("Provider", back_populates="services")

    __table_args__ = (
        CheckConstraint("base_price >= 0", name="check_service_price_non_negative"),
        CheckConstraint("duration > 0", name="check_service_duration_positive"),
        CheckConstraint("currency IN ('JMD', 'USD')", name="ck_services_currency"),
    )

    def __repr__(self) -> str:
        return f"<Service {self.id}: {self.name} {self.base_price} {self.currency}>"
