"""
Configuration module for the GeoIP API
"""

import os

from . import __version__


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


API_VERSION = os.getenv("APP_VERSION", __version__)

# Database configuration
GEOIP_DB_PATH = os.getenv("GEOIP_DB_PATH", "/data/geo/GeoLite2-City.mmdb")

# Server configuration
BIND_ADDRESS = os.getenv("BIND_ADDRESS", "0.0.0.0:8080")
HEALTH_PATH = "/healthz"

# Response schema: echo the requested address back as "ip"
INCLUDE_IP: bool = env_bool("INCLUDE_IP", True)

# Prometheus endpoint at /metrics; off by default so /metrics stays an ordinary (invalid) address
METRICS_ENABLED: bool = env_bool("METRICS_ENABLED", False)
METRICS_PATH = "/metrics"

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_CONFIG = os.getenv("LOG_CONFIG", "LOGGING.yaml")
HTTP_LOG_EXCLUDE_PATHS = set(os.getenv("HTTP_LOG_EXCLUDE_PATHS", "/healthz,/metrics").split(","))
