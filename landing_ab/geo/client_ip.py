"""Best-effort client IP extraction.

The headers scanned here can be forged by any client when no trusted reverse
proxy strips them.  The result is only good enough to bucket visitors by
country; it must not be used for access control or rate limiting.
"""

from __future__ import annotations

import ipaddress
from typing import Mapping, Optional

LOOPBACK = "127.0.0.1"

# Highest priority first.
IP_HEADERS = (
    "cf-connecting-ip",  # Cloudflare
    "x-real-ip",  # nginx
    "x-forwarded-for",
    "client-ip",
    "x-forwarded",
    "forwarded-for",
    "forwarded",
)


def is_valid_ip(candidate: str) -> bool:
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return False
    return True


def extract_client_ip(
        headers: Mapping[str, str],
        remote_addr: Optional[str] = None,
        ) -> str:
    """Return the most plausible client IP for a request.

    Args:
        headers: Request headers.  Names are matched case-insensitively.
        remote_addr: Address of the connection peer, tried last.

    Returns:
        The first valid IPv4/IPv6 literal found, or ``127.0.0.1``.
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}
    candidates = [(name, lowered.get(name)) for name in IP_HEADERS]
    candidates.append(("remote-addr", remote_addr))

    for name, value in candidates:
        if not value:
            continue
        ip = value
        if name == "x-forwarded-for":
            # left-most entry is the originating client
            ip = value.split(",")[0]
        ip = ip.strip()
        if is_valid_ip(ip):
            return ip
    return LOOPBACK


__all__ = ["extract_client_ip", "is_valid_ip", "IP_HEADERS", "LOOPBACK"]
