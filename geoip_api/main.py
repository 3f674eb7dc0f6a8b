"""GeoIP API - resolves IP addresses to geolocation records from a MaxMind DB file."""

import argparse
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .api.health import router as health_router
from .api.lookup import router as lookup_router
from .api.prometheus import router as prometheus_router
from .api.response_builders import build_http_error_response
from .errors import StartupError
from .logging_config import setup_logging
from .middleware import TracingMiddleware
from .services.database import DatabaseHandle

logger = logging.getLogger("geoip_api")


def create_app(database: Optional[DatabaseHandle] = None, db_path: Optional[str] = None,
               include_ip: Optional[bool] = None, metrics_enabled: Optional[bool] = None) -> FastAPI:
    """Build the ASGI app.

    ``database`` is shared by reference with every request. When it is not given and
    ``db_path`` is, the lifespan opens the file on startup and closes it on shutdown.
    """

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        owns_database = False
        if application.state.database is None and db_path:
            application.state.database = DatabaseHandle.open(db_path)
            owns_database = True

        logger.info("GeoIP API ready", extra={
            "component": "api",
            "database_loaded": application.state.database is not None,
            "include_ip": application.state.include_ip,
        })
        try:
            yield
        finally:
            if owns_database:
                application.state.database.close()
                application.state.database = None
            logger.info("GeoIP API shutting down", extra={"component": "api"})

    application = FastAPI(
        title="GeoIP API",
        version=config.API_VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    application.state.database = database
    application.state.include_ip = config.INCLUDE_IP if include_ip is None else include_ip

    application.add_middleware(TracingMiddleware)

    # Unhandled errors are answered with a 500 by TracingMiddleware
    @application.exception_handler(StarletteHTTPException)
    async def http_exception(request: Request, exc: StarletteHTTPException):
        return build_http_error_response(exc.status_code, headers=getattr(exc, "headers", None))

    # Fixed paths first; the lookup route matches everything else
    if metrics_enabled is None:
        metrics_enabled = config.METRICS_ENABLED
    application.include_router(health_router)
    if metrics_enabled:
        application.include_router(prometheus_router)
    application.include_router(lookup_router)

    return application


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="geoip-api",
        description="Serve geolocation lookups for IP addresses from a MaxMind DB file",
    )
    parser.add_argument("bind", nargs="?", default=config.BIND_ADDRESS,
                        help=f"Bind address ip:port (default: {config.BIND_ADDRESS})")
    parser.add_argument("database", nargs="?", default=config.GEOIP_DB_PATH,
                        help=f"Path to the .mmdb file (default: {config.GEOIP_DB_PATH})")
    parser.add_argument("--log-level", default=None, help="Log level (default: $LOG_LEVEL or INFO)")
    parser.add_argument("--log-format", choices=["json", "text"], default=None,
                        help="Log format (default: $LOG_FORMAT or json)")
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level, log_format=args.log_format)

    from .server import serve
    try:
        serve(args.bind, args.database)
    except StartupError as e:
        logger.error(e.message, extra={"component": "server", "resource": e.resource})
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
