# backend/marketplace/routes/prometheus.py
"""
Prometheus scrape endpoint.

Unauthenticated, like most scrape targets; it only exposes counters and
timings, never booking data.
"""

from fastapi import APIRouter, Response
from prometheus_client import Counter

from ..monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

router = APIRouter()

scrapes_total = Counter(
    "marketplace_prometheus_scrapes_total",
    "Scrapes served by /metrics/prometheus",
    registry=REGISTRY,
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get(
    "/metrics/prometheus", include_in_schema=False, response_class=Response, response_model=None
)
async def get_prometheus_metrics() -> Response:
    scrapes_total.inc()
    return Response(
        content=prometheus_metrics.render(),
        media_type=prometheus_metrics.content_type(),
        headers=NO_CACHE_HEADERS,
    )
