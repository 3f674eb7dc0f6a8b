"""
Address lookup endpoint: GET/HEAD /<ip-address>
"""

import ipaddress
import logging

from fastapi import APIRouter, Request

from .. import config
from ..services.lookup import Failed, Found, NotFound, lookup_ip
from ..services.prometheus_metrics import prometheus_metrics
from .response_builders import GeoJSONResponse, build_invalid_ip_response, build_outcome_response

logger = logging.getLogger("geoip_api.lookup")

router = APIRouter()

_OUTCOME_LABELS = {Found: "found", NotFound: "not_found", Failed: "failed"}


# Sync endpoint: FastAPI runs it on the threadpool so lookups never block the event loop
@router.api_route("/{address:path}", methods=["GET", "HEAD"], include_in_schema=False)
def lookup(address: str, request: Request) -> GeoJSONResponse:
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError:
        prometheus_metrics.increment_lookups("invalid")
        return build_invalid_ip_response()

    database = getattr(request.app.state, "database", None)
    if database is None:
        outcome = Failed("database not loaded")
    else:
        outcome = lookup_ip(database, parsed, requested=address)

    prometheus_metrics.increment_lookups(_OUTCOME_LABELS[type(outcome)])
    if isinstance(outcome, Failed):
        logger.error("GeoIP lookup failed", extra={
            "component": "lookup",
            "address": address,
            "reason": outcome.reason,
        })

    include_ip = getattr(request.app.state, "include_ip", config.INCLUDE_IP)
    return build_outcome_response(outcome, include_ip=include_ip)
