"""
Prometheus metrics for the GeoIP API
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

from ..config import API_VERSION

# Build info
BUILD_INFO = Gauge(
    'build_info',
    'Build information',
    ['version']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'geoip_requests_total',
    'Total number of HTTP requests',
    ['status_class']
)

REQUEST_LATENCY = Histogram(
    'geoip_request_latency_ms',
    'HTTP request latency in milliseconds',
    buckets=[0.5, 1, 2.5, 5, 10, 25, 50, 100, 250, 500, 1000]
)

# Lookup outcomes: found, not_found, failed, invalid
LOOKUPS_TOTAL = Counter(
    'geoip_lookups_total',
    'Total number of address lookups by outcome',
    ['outcome']
)

LOOKUP_SECONDS = Histogram(
    'geoip_lookup_seconds',
    'Database lookup latency in seconds',
    buckets=[0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05]
)

# Database state
DATABASE_LOADED = Gauge(
    'geoip_database_loaded',
    'GeoIP database loaded status (1=loaded, 0=not loaded)'
)

DATABASE_BUILD_EPOCH = Gauge(
    'geoip_database_build_epoch',
    'Build timestamp of the loaded GeoIP database'
)


class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        BUILD_INFO.labels(version=API_VERSION).set(1)

    def increment_requests(self, status_code: int):
        """Increment request counter."""
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        REQUESTS_TOTAL.labels(status_class=status_class).inc()

    def observe_request_latency(self, latency_ms: float):
        REQUEST_LATENCY.observe(latency_ms)

    def increment_lookups(self, outcome: str):
        LOOKUPS_TOTAL.labels(outcome=outcome).inc()

    def observe_lookup_seconds(self, seconds: float):
        LOOKUP_SECONDS.observe(seconds)

    def set_database_loaded(self, loaded: bool, build_epoch: int = 0):
        """Set database loaded status and its build timestamp."""
        DATABASE_LOADED.set(1 if loaded else 0)
        DATABASE_BUILD_EPOCH.set(build_epoch if loaded else 0)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global instance
prometheus_metrics = PrometheusMetrics()
