"""
Response builders for lookup outcomes
Ensures exact JSON bodies and headers for every status the service returns
"""

from typing import Dict, Optional

from fastapi.responses import JSONResponse

from .. import config
from ..services.lookup import Failed, Found, LookupOutcome, NotFound

JSON_MEDIA_TYPE = "application/json; charset=UTF-8"


class GeoJSONResponse(JSONResponse):
    """JSONResponse with an explicit UTF-8 charset on the content type"""
    media_type = JSON_MEDIA_TYPE


def _error(status_code: int, error: str, headers: Optional[Dict[str, str]] = None) -> GeoJSONResponse:
    return GeoJSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def build_health_response() -> GeoJSONResponse:
    return GeoJSONResponse(status_code=200, content={"status": "healthy"})


def build_invalid_ip_response() -> GeoJSONResponse:
    """400 for a path that is not an IPv4/IPv6 address"""
    return _error(400, "invalid_ip")


def build_not_found_response() -> GeoJSONResponse:
    return _error(404, "not_found")


def build_internal_error_response() -> GeoJSONResponse:
    return _error(500, "internal_error")


_HTTP_ERRORS = {
    404: "not_found",
    405: "method_not_allowed",
}


def build_http_error_response(status_code: int, headers: Optional[Dict[str, str]] = None) -> GeoJSONResponse:
    """Routing errors raised by the framework, e.g. 405 with its Allow header"""
    return _error(status_code, _HTTP_ERRORS.get(status_code, "http_error"), headers=headers)


def build_record_response(outcome: Found, include_ip: bool) -> GeoJSONResponse:
    """200 with the record; name groups are always present, possibly empty"""
    exclude = None if include_ip else {"ip"}
    return GeoJSONResponse(status_code=200, content=outcome.record.model_dump(exclude=exclude))


_OUTCOME_BUILDERS = {
    Found: build_record_response,
    NotFound: lambda outcome, include_ip: build_not_found_response(),
    Failed: lambda outcome, include_ip: build_internal_error_response(),
}


def build_outcome_response(outcome: LookupOutcome, include_ip: Optional[bool] = None) -> GeoJSONResponse:
    """Map a lookup outcome to its HTTP response"""
    if include_ip is None:
        include_ip = config.INCLUDE_IP
    builder = _OUTCOME_BUILDERS.get(type(outcome))
    if builder is None:
        raise TypeError(f"Unknown lookup outcome: {outcome!r}")
    return builder(outcome, include_ip)
