"""MaxMind GeoLite2 country resolver.

``MaxMindCountryResolver`` reads a local ``GeoLite2-Country.mmdb`` file via
the ``geoip2`` package.  Provisioning and updating the database is left to
the operator; see the MaxMind documentation for download instructions.

Environment variables used:

* ``LANDING_AB_GEOIP_DB`` – path to the database (read by
  :func:`landing_ab.config.load_settings`).
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional

import geoip2.database
from geoip2.errors import AddressNotFoundError, GeoIP2Error
from maxminddb.errors import InvalidDatabaseError

from landing_ab.geo import GeoResolver

LOGGER = logging.getLogger(__name__)

# seconds before a missing or broken database is checked again
RETRY_INTERVAL = 300.0


class MaxMindCountryResolver(GeoResolver):
    """MaxMind implementation of the ``GeoResolver`` interface."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._reader: Optional[geoip2.database.Reader] = None
        self._lock = threading.Lock()
        self._retry_at = 0.0

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _get_reader(self) -> Optional[geoip2.database.Reader]:
        if self._reader is not None:
            return self._reader
        with self._lock:
            if self._reader is not None:
                return self._reader
            now = time.monotonic()
            if now < self._retry_at:
                return None
            if not self._db_path.exists():
                LOGGER.warning("GeoIP database not found: %s", self._db_path)
                self._retry_at = now + RETRY_INTERVAL
                return None
            try:
                self._reader = geoip2.database.Reader(str(self._db_path))
            except (InvalidDatabaseError, ValueError, OSError) as exc:
                LOGGER.warning("GeoIP database %s unusable: %s", self._db_path, exc)
                self._retry_at = now + RETRY_INTERVAL
                return None
        return self._reader

    def is_available(self) -> bool:
        return self._get_reader() is not None

    def resolve_country(self, ip: str) -> Optional[str]:
        reader = self._get_reader()
        if reader is None:
            return None
        try:
            record = reader.country(ip)
        except AddressNotFoundError:
            # private and reserved ranges are not in the database
            LOGGER.debug("no GeoIP record for %s", ip)
            return None
        except (GeoIP2Error, InvalidDatabaseError, ValueError, TypeError) as exc:
            LOGGER.warning("GeoIP lookup failed for %s: %s", ip, exc)
            return None

        code = record.country.iso_code
        if not code:
            return None
        return code.upper()

    def close(self) -> None:
        with self._lock:
            if self._reader is not None:
                self._reader.close()
                self._reader = None


__all__ = ["MaxMindCountryResolver"]
