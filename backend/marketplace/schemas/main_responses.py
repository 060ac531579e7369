"""Response schemas for infrastructure endpoints."""

from pydantic import Field

from ._strict_base import StrictModel


class HealthResponse(StrictModel):
    status: str = Field(description="'healthy' while the process is serving requests")
    service: str
    version: str = Field(description="Deployed API version")
    environment: str
    timestamp: str = Field(description="Response time, ISO 8601 in UTC with a Z suffix")


class HealthLiteResponse(StrictModel):
    """Liveness probe body."""

    status: str
