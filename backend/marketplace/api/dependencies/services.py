# backend/marketplace/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService
from .database import get_db


def get_notification_service() -> NotificationService:
    """Get notification service instance."""
    return NotificationService()


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    """
    Get booking service instance with all dependencies.

    Args:
        db: Database session
        notification_service: Sink for booking confirmations

    Returns:
        BookingService instance
    """
    return BookingService(db, notification_service)
