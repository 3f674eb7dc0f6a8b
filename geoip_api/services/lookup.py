"""
Lookup adapter: maps a parsed address to Found, NotFound or Failed
"""

import logging
import time
from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address
from typing import Any, Dict, List, Optional, Union

from ..schemas.geo import GeolocationRecord
from .database import DatabaseHandle
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geoip_api.lookup")

Address = Union[IPv4Address, IPv6Address]


@dataclass(frozen=True)
class Found:
    record: GeolocationRecord


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


LookupOutcome = Union[Found, NotFound, Failed]


def _names(section: Optional[Dict[str, Any]]) -> Dict[str, str]:
    if not section:
        return {}
    return dict(section.get("names") or {})


def _subdivision_names(subdivisions: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
    return [_names(subdivision) for subdivision in subdivisions or []]


def build_record(raw: Dict[str, Any], ip: Optional[str] = None) -> GeolocationRecord:
    """Build a record from a raw City/Country database entry."""
    location = raw.get("location") or {}
    country = raw.get("country") or {}
    return GeolocationRecord(
        ip=ip,
        latitude=location.get("latitude") or 0.0,
        longitude=location.get("longitude") or 0.0,
        time_zone=location.get("time_zone") or "",
        iso_code=country.get("iso_code") or "",
        city=_names(raw.get("city")),
        subdivisions=_subdivision_names(raw.get("subdivisions")),
        country=_names(country),
        registered_country=_names(raw.get("registered_country")),
    )


def lookup_ip(handle: DatabaseHandle, address: Address, requested: Optional[str] = None) -> LookupOutcome:
    """Look up ``address``. Never raises; reader and decoding errors become Failed."""
    # An IPv4-only tree has no data for IPv6 addresses
    if address.version == 6 and handle.ip_version == 4:
        return NotFound()

    start = time.perf_counter()
    try:
        raw = handle.get(address)
        if raw is None:
            return NotFound()
        if not isinstance(raw, dict):
            return Failed(f"unexpected record type {type(raw).__name__}")
        return Found(build_record(raw, ip=requested if requested is not None else str(address)))
    except Exception as e:
        logger.debug("GeoIP lookup raised", exc_info=True)
        return Failed(f"{type(e).__name__}: {e}")
    finally:
        prometheus_metrics.observe_lookup_seconds(time.perf_counter() - start)
