"""Resolve IP addresses through the configured GeoLite2 database.

Use this after provisioning or updating the MaxMind database to check that
the file is readable and returns the expected countries::

    python scripts/geo_lookup.py 8.8.8.8 81.2.69.160
"""

from __future__ import annotations

import sys
from typing import List

from landing_ab.config import load_settings
from landing_ab.geo.client_ip import is_valid_ip
from landing_ab.geo.maxmind import MaxMindCountryResolver


def main(argv: List[str]) -> int:
    settings = load_settings()
    resolver = MaxMindCountryResolver(settings.geoip_db)
    if not resolver.is_available():
        print(f"GeoIP database unavailable: {resolver.db_path}", file=sys.stderr)
        return 1
    for ip in argv:
        if not is_valid_ip(ip):
            print(f"{ip}\tinvalid address")
            continue
        print(f"{ip}\t{resolver.resolve_country(ip) or '-'}")
    resolver.close()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main(sys.argv[1:]))
