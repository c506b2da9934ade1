"""Cookie-backed sticky assignment and geo cache.

Both stores key their cookie by the original page id, so two campaigns on
different original pages never share state, and they expire independently:
switching a campaign between ``random`` and ``geo`` leaves the other cookie
untouched.
"""

from __future__ import annotations

import logging
import random
import re
from typing import Optional

from landing_ab.ab_testing import Variant, draw_variant, parse_variant
from landing_ab.ab_testing.cookies import CookieJar

LOGGER = logging.getLogger(__name__)

ASSIGNMENT_COOKIE_PREFIX = "landing_ab_assign"
COUNTRY_COOKIE_PREFIX = "landing_ab_country"

ASSIGNMENT_TTL = 60 * 60 * 24 * 30  # 30 days
COUNTRY_TTL = 60 * 60 * 6  # 6 hours

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")


def assignment_cookie_name(original_page_id: int) -> str:
    return f"{ASSIGNMENT_COOKIE_PREFIX}_{int(original_page_id)}"


def country_cookie_name(original_page_id: int) -> str:
    return f"{COUNTRY_COOKIE_PREFIX}_{int(original_page_id)}"


class StickyAssignmentStore:
    """Variant assignment persisted in a 30-day cookie.

    Once written, an assignment is never changed; it disappears only when
    :meth:`clear` is called or the browser drops the expired cookie.
    """

    def __init__(self, jar: CookieJar, rng: Optional[random.Random] = None) -> None:
        self._jar = jar
        self._rng = rng

    def get(self, original_page_id: int) -> Optional[Variant]:
        """Return the visitor's variant, ignoring anything but ``a``/``b``."""
        raw = self._jar.get(assignment_cookie_name(original_page_id))
        return parse_variant(raw)

    def assign(self, original_page_id: int) -> Variant:
        """Return the existing assignment or draw and persist a new one."""
        existing = self.get(original_page_id)
        if existing is not None:
            return existing
        variant = draw_variant(self._rng)
        self._jar.set(assignment_cookie_name(original_page_id), variant, ASSIGNMENT_TTL)
        LOGGER.debug("assigned variant %s for original page %s", variant, original_page_id)
        return variant

    def clear(self, original_page_id: int) -> None:
        """Expire the assignment cookie; a no-op when there is none."""
        if self._jar.expire(assignment_cookie_name(original_page_id)):
            LOGGER.debug("cleared assignment for original page %s", original_page_id)


class CountryCache:
    """Resolved visitor country kept in a 6-hour cookie."""

    def __init__(self, jar: CookieJar) -> None:
        self._jar = jar

    def get(self, original_page_id: int) -> Optional[str]:
        raw = self._jar.get(country_cookie_name(original_page_id))
        if raw and _COUNTRY_RE.match(raw):
            return raw
        return None

    def put(self, original_page_id: int, country: str) -> None:
        self._jar.set(country_cookie_name(original_page_id), country, COUNTRY_TTL)


__all__ = [
    "StickyAssignmentStore",
    "CountryCache",
    "assignment_cookie_name",
    "country_cookie_name",
    "ASSIGNMENT_TTL",
    "COUNTRY_TTL",
]
