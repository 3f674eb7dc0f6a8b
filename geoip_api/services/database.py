"""
Read-only handle over a MaxMind DB file, opened once and shared by every request
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import maxminddb

from ..errors import StartupError
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("geoip_api.database")


class DatabaseHandle:
    """Immutable wrapper around an open ``maxminddb.Reader``.

    The reader is safe for concurrent ``get`` calls; nothing here is mutated after
    construction, so request handlers share one instance without locking.
    """

    __slots__ = ("path", "_reader", "_metadata")

    def __init__(self, path: str, reader):
        self.path = path
        self._reader = reader
        self._metadata = reader.metadata()

    @classmethod
    def open(cls, path: str) -> "DatabaseHandle":
        """Open the database at ``path`` or raise StartupError."""
        try:
            reader = maxminddb.open_database(path)
        except FileNotFoundError:
            raise StartupError("database", f'Unable to open database file: "{path}" (file not found)')
        except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
            raise StartupError("database", f'Unable to open database file: "{path}" ({e})')

        handle = cls(path, reader)
        prometheus_metrics.set_database_loaded(True, handle.build_epoch)
        logger.info("GeoIP database loaded", extra={
            "component": "database",
            "event": "loaded",
            **handle.describe(),
        })
        return handle

    @property
    def ip_version(self) -> int:
        return self._metadata.ip_version

    @property
    def build_epoch(self) -> int:
        return self._metadata.build_epoch

    def describe(self) -> Dict[str, Any]:
        """Return metadata about the loaded database."""
        meta = self._metadata
        return {
            "db_path": self.path,
            "db_type": meta.database_type,
            "build_date": datetime.fromtimestamp(meta.build_epoch, tz=timezone.utc).strftime("%Y-%m-%d %H:%M"),
            "node_count": meta.node_count,
            "ip_version": meta.ip_version,
            "languages": list(meta.languages),
        }

    def get(self, address) -> Optional[Any]:
        """Raw record for ``address`` or None. Reader errors propagate."""
        return self._reader.get(address)

    def close(self):
        self._reader.close()
        prometheus_metrics.set_database_loaded(False)
