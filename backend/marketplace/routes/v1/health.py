# backend/marketplace/routes/v1/health.py
"""
Health endpoints for load balancers and uptime checks.

Neither endpoint touches the database.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from ...core.config import settings
from ...core.constants import API_VERSION, BRAND_NAME
from ...schemas.main_responses import HealthLiteResponse, HealthResponse

router = APIRouter(tags=["health"])

SERVICE_NAME = f"{BRAND_NAME.lower()}-api"


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Service identity, version and deployment environment."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=API_VERSION,
        environment=settings.environment,
        timestamp=f"{now.isoformat()}Z",
    )


@router.get("/lite", response_model=HealthLiteResponse)
def health_check_lite() -> HealthLiteResponse:
    return HealthLiteResponse(status="ok")
