# backend/marketplace/services/notification_service.py
"""
Notification sink for booking events.

Outbound delivery (email, SMS, push) is owned by an external provider; this
sink records the event in the log so downstream delivery can be attached
without touching the booking engine.
"""

import asyncio
import logging
from typing import Optional, Set

from ..core.config import settings
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

# Strong references to in-flight dispatches; the event loop only keeps weak ones
_pending_dispatches: Set["asyncio.Task[None]"] = set()


class NotificationService:
    """Booking notification sink."""

    def __init__(self, enabled: Optional[bool] = None) -> None:
        self.enabled = settings.notifications_enabled if enabled is None else enabled
        self.logger = logging.getLogger(self.__class__.__name__)

    async def send_booking_confirmation(self, booking_id: str) -> None:
        """Emit a booking confirmation for ``booking_id``."""
        if not self.enabled:
            self.logger.debug("Notifications disabled; skipping confirmation for %s", booking_id)
            prometheus_metrics.record_notification_outcome("skipped")
            return
        self.logger.info("Booking confirmation queued for booking %s", booking_id)
        prometheus_metrics.record_notification_outcome("sent")

    def dispatch_booking_confirmation(self, booking_id: str) -> "asyncio.Task[None]":
        """
        Schedule ``send_booking_confirmation`` without awaiting it.

        Must be called from a running event loop. Failures are logged and
        never propagate to the caller.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self.send_booking_confirmation(booking_id))
        _pending_dispatches.add(task)

        def _consume_task_exception(t: "asyncio.Task[None]") -> None:
            _pending_dispatches.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                prometheus_metrics.record_notification_outcome("failed")
                logger.error(
                    "Booking confirmation failed for booking %s: %s",
                    booking_id,
                    exc,
                    exc_info=exc,
                )

        task.add_done_callback(_consume_task_exception)
        return task
