"""Runtime configuration read from environment variables.

Environment variables used:

* ``LANDING_AB_DATABASE_URL`` – SQLAlchemy URL of the settings database;
  defaults to a SQLite file under ``landing_ab/data``.
* ``LANDING_AB_GEOIP_DB`` – path to a MaxMind ``GeoLite2-Country.mmdb``.
* ``LANDING_AB_COOKIE_PATH`` – cookie path; defaults to ``/``.
* ``LANDING_AB_COOKIE_DOMAIN`` – cookie domain; unset means host-only.
* ``LANDING_AB_ADMIN_PREFIX`` – URL prefix of the back-office endpoints.
  Requests under it are never redirected.
* ``LANDING_AB_SITE_URL`` – optional absolute base for redirect targets
  (e.g. ``https://example.com``).  When unset ``Location`` headers are
  root-relative; the request ``Host`` header is never used.
* ``LANDING_AB_HOST`` / ``LANDING_AB_PORT`` / ``LANDING_AB_LOG_LEVEL`` –
  options for the uvicorn entry point in :mod:`landing_ab.app`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
DEFAULT_DATABASE_URL = f"sqlite:///{DATA_DIR / 'landing_ab.db'}"
DEFAULT_GEOIP_DB = DATA_DIR / "GeoLite2-Country.mmdb"


@dataclass(frozen=True)
class Settings:
    """Deployment options shared by the web layer and the decision engine."""

    database_url: str = DEFAULT_DATABASE_URL
    geoip_db: Path = DEFAULT_GEOIP_DB
    cookie_path: str = "/"
    cookie_domain: Optional[str] = None
    admin_prefix: str = "/admin"
    site_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    def is_admin_path(self, path: str) -> bool:
        prefix = self.admin_prefix.rstrip("/")
        if not prefix:
            return False
        return path == prefix or path.startswith(prefix + "/")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    Raises:
        ValueError: If ``LANDING_AB_PORT`` is not an integer.
    """
    env = os.environ if environ is None else environ
    port_raw = env.get("LANDING_AB_PORT", "8000")
    try:
        port = int(port_raw)
    except ValueError as exc:
        raise ValueError(f"LANDING_AB_PORT must be an integer, got {port_raw!r}") from exc

    return Settings(
        database_url=env.get("LANDING_AB_DATABASE_URL") or DEFAULT_DATABASE_URL,
        geoip_db=Path(env.get("LANDING_AB_GEOIP_DB") or DEFAULT_GEOIP_DB),
        cookie_path=env.get("LANDING_AB_COOKIE_PATH") or "/",
        cookie_domain=env.get("LANDING_AB_COOKIE_DOMAIN") or None,
        admin_prefix=env.get("LANDING_AB_ADMIN_PREFIX") or "/admin",
        site_url=(env.get("LANDING_AB_SITE_URL") or "").rstrip("/") or None,
        host=env.get("LANDING_AB_HOST") or "0.0.0.0",
        port=port,
        log_level=(env.get("LANDING_AB_LOG_LEVEL") or "info").lower(),
    )


__all__ = ["Settings", "load_settings", "DATA_DIR"]
