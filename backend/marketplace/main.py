# backend/marketplace/main.py
"""
ASGI application for the marketplace API.

Run locally with ``python run.py`` or ``uvicorn marketplace.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI
from fastapi.routing import APIRoute

from .core.config import is_running_tests, settings
from .core.constants import API_VERSION, BRAND_NAME
from .database import Base, engine
from .errors import register_error_handlers
from .routes import prometheus
from .routes.v1 import bookings as bookings_v1, health as health_v1

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("%s API starting (environment=%s)", BRAND_NAME, settings.environment)

    # SQLite files are created on first start; other databases are provisioned externally
    if settings.is_sqlite and not is_running_tests():
        Base.metadata.create_all(bind=engine)

    yield

    engine.dispose()
    logger.info("%s API stopped", BRAND_NAME)


def _operation_id(route: APIRoute) -> str:
    """OpenAPI operation id built from method, path segments and endpoint name."""
    method = sorted(route.methods or {"get"})[0].lower()
    path = route.path_format.strip("/").replace("{", "").replace("}", "")
    parts = [method] + [segment for segment in path.replace("-", "_").split("/") if segment]
    return "_".join(parts + [route.name])


app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant service booking marketplace",
    version=API_VERSION,
    lifespan=app_lifespan,
    generate_unique_id_function=_operation_id,
)
register_error_handlers(app)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(health_v1.router, prefix="/health")

app.include_router(api_v1)
app.include_router(prometheus.router)
