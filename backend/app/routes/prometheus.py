"""
Prometheus metrics endpoint for monitoring infrastructure.

Public, like most Prometheus scrape targets. It exposes the HTTP metrics
collected by PrometheusMiddleware, the service timings recorded by
@measure_operation, and the scheduling counters.
"""

from fastapi import APIRouter, Request, Response
from prometheus_client import Counter

from ..core.constants import METRICS_PATH
from ..monitoring.prometheus_metrics import REGISTRY, prometheus_metrics

router = APIRouter()

_scrape_counter = Counter(
    "swimschool_prometheus_scrapes_total",
    "Total number of Prometheus metrics scrapes",
    registry=REGISTRY,
)


@router.get(METRICS_PATH, include_in_schema=False, response_class=Response, response_model=None)
async def get_prometheus_metrics(request: Request) -> Response:
    """
    Expose Prometheus metrics for scraping.

    Pass ?refresh=1 to bypass the short-lived payload cache.
    """
    if request.query_params.get("refresh", "").lower() in {"1", "true", "yes"}:
        prometheus_metrics._invalidate_cache()
    _scrape_counter.inc()

    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )
