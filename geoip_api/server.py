"""
Connection server: binds the listening socket once and runs uvicorn over the app
"""

import logging
import socket
from typing import Optional, Tuple

import uvicorn
from fastapi import FastAPI

from .errors import StartupError
from .services.database import DatabaseHandle

logger = logging.getLogger("geoip_api.server")


def parse_bind_address(bind: str) -> Tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` for IPv6) into its parts."""
    host, sep, port = bind.rpartition(":")
    if not sep or not host or not port.isdigit() or int(port) > 65535:
        raise StartupError("bind", f'Invalid bind address: "{bind}"')
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


def bind_socket(host: str, port: int) -> socket.socket:
    """Create and bind the listening socket; uvicorn calls listen() on it."""
    try:
        family, sock_type, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)[0]
    except socket.gaierror as e:
        raise StartupError("bind", f'Invalid bind address: "{host}:{port}" ({e})')

    sock = socket.socket(family, sock_type, proto)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind(sockaddr)
    except OSError as e:
        sock.close()
        raise StartupError("bind", f'Unable to bind address "{host}:{port}" ({e.strerror or e})')
    sock.set_inheritable(True)
    return sock


def build_server(app: FastAPI, timeout_keep_alive: int = 5) -> uvicorn.Server:
    # Logging is configured by setup_logging; uvicorn must not replace it
    server_config = uvicorn.Config(
        app,
        log_config=None,
        access_log=False,
        timeout_keep_alive=timeout_keep_alive,
        server_header=False,
    )
    return uvicorn.Server(server_config)


def serve(bind: str, db_path: str, include_ip: Optional[bool] = None,
          metrics_enabled: Optional[bool] = None):
    """Open the database, bind, and serve until terminated.

    Raises StartupError before anything is served if the bind address or the
    database cannot be acquired.
    """
    from .main import create_app

    host, port = parse_bind_address(bind)
    database = DatabaseHandle.open(db_path)
    try:
        sock = bind_socket(host, port)
    except StartupError:
        database.close()
        raise

    app = create_app(database=database, include_ip=include_ip, metrics_enabled=metrics_enabled)
    logger.info(f"Starting GeoIP API on {bind}", extra={"component": "server", "bind": bind})
    try:
        build_server(app).run(sockets=[sock])
    finally:
        sock.close()
        database.close()
