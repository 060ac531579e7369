# backend/marketplace/services/base.py
"""
Base Service Pattern for the marketplace backend.

Provides common functionality for all service classes including:
- Transaction management (explicit unit-of-work scopes)
- Logging
- Performance monitoring
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import SLOW_OPERATION_THRESHOLD_SECONDS
from ..core.exceptions import RepositoryException, ServiceException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Transaction handling
    - Performance monitoring
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Everything done inside the block commits together or not at all.
        Persistence failures are rolled back and surfaced as ServiceException;
        any other exception is rolled back and re-raised unchanged.

        Usage:
            with self.transaction():
                booking = self.booking_repository.create(...)
                self.booking_repository.create_item(booking, ...)
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise ServiceException(f"Database operation failed: {str(e)}") from e
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                ...

        Works for both sync and async methods.
        """

        def _record(self: Any, elapsed: float, error_type: str | None) -> None:
            if elapsed > SLOW_OPERATION_THRESHOLD_SECONDS:
                self.logger.warning(
                    f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                )
            try:
                prometheus_metrics.record_service_operation(
                    service=self.__class__.__name__,
                    operation=operation_name,
                    duration=elapsed,
                    status="error" if error_type else "success",
                    error_type=error_type,
                )
            except Exception:
                # Don't let metrics collection break the operation
                logger.debug("Failed to record metrics for %s", operation_name, exc_info=True)

        def decorator(func: F) -> F:
            if not asyncio.iscoroutinefunction(func):

                @wraps(func)
                def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.perf_counter()
                    error_type = None
                    try:
                        return func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _record(self, time.perf_counter() - start_time, error_type)

                return cast(F, wrapper)

            @wraps(func)
            async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.perf_counter()
                error_type = None
                try:
                    return await func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _record(self, time.perf_counter() - start_time, error_type)

            return cast(F, async_wrapper)

        return decorator
