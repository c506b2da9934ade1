"""Country lookups for geo bucketing.

This subpackage defines the ``GeoResolver`` interface consumed by the
decision engine, the client IP heuristics in :mod:`.client_ip` and a
MaxMind-backed implementation in :mod:`.maxmind`.  A resolver is a fallible
capability: callers must always be ready to serve the original page.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class GeoResolver(ABC):
    """Abstract base class for IP to country resolvers."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if lookups can be attempted at all.

        False when the backing database is missing or cannot be opened.
        """
        raise NotImplementedError

    @abstractmethod
    def resolve_country(self, ip: str) -> Optional[str]:
        """Resolve ``ip`` to an uppercase ISO-3166 alpha-2 code.

        Args:
            ip: An IPv4 or IPv6 literal.

        Returns:
            The country code, or None on any failure.  Implementations must
            not raise for lookup problems.
        """
        raise NotImplementedError


__all__ = ["GeoResolver"]
