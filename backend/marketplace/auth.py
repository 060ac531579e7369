# backend/marketplace/auth.py
"""
Bearer token verification.

Tokens are issued by the identity provider and signed with the shared
secret; this service only needs the ``sub`` claim (the user id).
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import jwt

from .core.config import settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header gets the same problem body as a bad token
bearer_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry of ``token`` and return its claims."""
    claims: Dict[str, Any] = jwt.decode(
        token,
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
        options={"verify_aud": False},
    )
    return claims


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign ``data`` as an access token.

    Used for service-to-service calls and tests; end users get their tokens
    from the identity provider.
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


async def get_current_user(token: Optional[str] = Depends(bearer_scheme)) -> str:
    """
    Resolve the caller's user id from the Authorization header.

    Raises:
        HTTPException: 401 when the token is missing, malformed, expired or
            carries no subject
    """
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        claims = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise _unauthorized("Could not validate credentials")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.warning("Bearer token has no subject claim")
        raise _unauthorized("Could not validate credentials")

    return subject
