# backend/marketplace/models/user.py
"""
User model for the service marketplace.

Users are owned by the identity provider; this service only reads them to
resolve customers, assignees and the authenticated actor.
"""

import logging

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    A person known to the marketplace (customer and/or provider team member).

    Attributes:
        id: ULID primary key
        email: Unique email address
        first_name: Given name
        last_name: Family name
        phone: Optional contact number
        is_active: Inactive users cannot authenticate
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=generate_ulid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"
