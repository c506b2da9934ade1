"""Variant decision engine.

``VariantDecisionEngine.decide`` runs once per page view.  It walks a fixed
sequence of gates and either abstains (:class:`NoRedirect`) or returns a
:class:`RedirectTo` pointing at one of the two variant pages.  Every failure
mode (bad configuration, missing geo database, unknown country, deleted
target page) ends in ``NoRedirect`` so the visitor always gets the original
page rather than an error.

Cookie writes made while deciding are queued on the request's
:class:`~landing_ab.ab_testing.cookies.CookieJar`; the web layer applies them
to the final response whichever decision is taken.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Mapping, Optional, Union

from landing_ab.ab_testing.assignment import CountryCache, StickyAssignmentStore
from landing_ab.ab_testing.cookies import CookieJar
from landing_ab.campaign import CampaignConfig
from landing_ab.geo import GeoResolver
from landing_ab.geo.client_ip import extract_client_ip
from landing_ab.pages import PageDirectory

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRequest:
    """What the engine needs to know about an inbound page view."""

    page_id: Optional[int]
    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    remote_addr: Optional[str] = None
    is_admin: bool = False


@dataclass(frozen=True)
class NoRedirect:
    reason: str = ""


@dataclass(frozen=True)
class RedirectTo:
    url: str
    status: int = 302


RedirectDecision = Union[NoRedirect, RedirectTo]


class VariantDecisionEngine:
    """Decide whether a page view of the original page is redirected."""

    def __init__(
            self,
            pages: PageDirectory,
            geo: GeoResolver,
            rng: Optional[random.Random] = None,
            ) -> None:
        self._pages = pages
        self._geo = geo
        self._rng = rng

    def decide(
            self,
            request: PageRequest,
            config: CampaignConfig,
            jar: CookieJar,
            ) -> RedirectDecision:
        """Return the redirect decision for one request.

        Args:
            request: The inbound page view.
            config: Campaign snapshot for this request.  It is expected to be
                sanitized already; page ids are still re-checked here.
            jar: Cookies of this request; assignment and geo cache writes are
                queued on it.

        Returns:
            ``RedirectTo`` with a 302 status, or ``NoRedirect`` with the
            reason for abstaining.
        """
        if request.is_admin:
            return self._abstain("admin request")
        if not config.active:
            return self._abstain("campaign inactive")
        if not config.has_valid_pages():
            return self._abstain(f"invalid page ids {config.page_ids}")
        if request.page_id is None or request.page_id != config.original_page_id:
            return self._abstain("not the original page")
        # loop prevention: never redirect away from a variant
        if request.page_id in (config.variant_a_page_id, config.variant_b_page_id):
            return self._abstain("already on a variant page")

        if config.method == "random":
            target_id = self._random_target(config, jar)
        elif config.method == "geo":
            target_id = self._geo_target(request, config, jar)
        else:
            return self._abstain(f"unknown method {config.method!r}")

        if target_id is None:
            return self._abstain("no variant for visitor")
        return self._redirect(request, target_id)

    def _random_target(self, config: CampaignConfig, jar: CookieJar) -> int:
        store = StickyAssignmentStore(jar, self._rng)
        variant = store.get(config.original_page_id)
        if variant is None:
            variant = store.assign(config.original_page_id)
        return config.variant_a_page_id if variant == "a" else config.variant_b_page_id

    def _geo_target(
            self,
            request: PageRequest,
            config: CampaignConfig,
            jar: CookieJar,
            ) -> Optional[int]:
        cache = CountryCache(jar)
        country = cache.get(config.original_page_id)
        if country is None:
            if not self._geo.is_available():
                LOGGER.debug("geo resolver unavailable; serving original page")
                return None
            ip = extract_client_ip(request.headers, request.remote_addr)
            country = self._geo.resolve_country(ip)
            if not country:
                LOGGER.debug("no country for %s; serving original page", ip)
                return None
            country = country.upper()
            cache.put(config.original_page_id, country)

        if country in config.variant_a_countries:
            return config.variant_a_page_id
        if country in config.variant_b_countries:
            return config.variant_b_page_id
        return None

    def _redirect(self, request: PageRequest, target_id: int) -> RedirectDecision:
        path = self._pages.permalink(target_id)
        if not path:
            return self._abstain(f"target page {target_id} not resolvable")
        url = request.base_url.rstrip("/") + path
        LOGGER.debug("redirecting to page %s (%s)", target_id, url)
        return RedirectTo(url, 302)

    @staticmethod
    def _abstain(reason: str) -> NoRedirect:
        LOGGER.debug("no redirect: %s", reason)
        return NoRedirect(reason)


__all__ = [
    "VariantDecisionEngine",
    "PageRequest",
    "RedirectDecision",
    "RedirectTo",
    "NoRedirect",
]
