# backend/marketplace/api/dependencies/auth.py
"""
Authentication dependencies.

The bearer token only carries the user id; the actor is loaded from the
database off the event loop so a slow lookup never blocks other requests.
"""

import asyncio
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_user as auth_get_current_user
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


async def get_current_user(
    current_user_id: str = Depends(auth_get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the database.

    Raises:
        HTTPException: 401 if the token's user does not exist
    """
    repository = RepositoryFactory.create_catalog_repository(db)
    user = await asyncio.to_thread(repository.get_user, current_user_id)
    if user is None:
        logger.warning(f"Token references unknown user {current_user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get the current authenticated and active user.

    Raises:
        HTTPException: 401 if the user has been deactivated
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive user",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user
