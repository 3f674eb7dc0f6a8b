"""
Prometheus metrics endpoint for the GeoIP API
"""

import logging

from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse

from ..config import METRICS_PATH
from ..services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geoip_api.metrics")

router = APIRouter(tags=["Metrics"])


@router.get(METRICS_PATH, summary="Prometheus metrics", include_in_schema=False)
async def get_prometheus_metrics() -> Response:
    """
    Get metrics in Prometheus exposition format.
    """
    try:
        return PlainTextResponse(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type()
        )
    except Exception as e:
        logger.error(f"Failed to get metrics: {e}")
        return PlainTextResponse(
            content="# Metrics temporarily unavailable\n",
            media_type="text/plain"
        )
