"""Campaign configuration shared by the settings store and the engine.

A campaign names one original page and two variant pages.  The page id
``0`` is the single sentinel for the site home page; variants must be real
pages (ids greater than zero).  :func:`sanitize_campaign` turns raw admin
input into a :class:`CampaignConfig`, deactivating campaigns whose page ids
are incomplete or not distinct.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, FrozenSet, Literal, Mapping, Optional

from landing_ab.campaign.countries import supported_codes

RedirectMethod = Literal["random", "geo"]

HOME_PAGE_ID = 0
REDIRECT_METHODS = ("random", "geo")


@dataclass(frozen=True)
class CampaignConfig:
    """Read-only snapshot of the campaign settings."""

    original_page_id: int = HOME_PAGE_ID
    variant_a_page_id: int = 0
    variant_b_page_id: int = 0
    active: bool = False
    method: RedirectMethod = "random"
    variant_a_countries: FrozenSet[str] = field(default_factory=frozenset)
    variant_b_countries: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def page_ids(self) -> tuple[int, int, int]:
        return (self.original_page_id, self.variant_a_page_id, self.variant_b_page_id)

    def has_valid_pages(self) -> bool:
        """Return True if the ids can form a campaign.

        The original may be the home page (``0``) but never negative; both
        variants must be positive and all three ids must differ.
        """
        original, variant_a, variant_b = self.page_ids
        if original < 0 or variant_a <= 0 or variant_b <= 0:
            return False
        return len(set(self.page_ids)) == 3

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_page_id": self.original_page_id,
            "variant_a_page_id": self.variant_a_page_id,
            "variant_b_page_id": self.variant_b_page_id,
            "active": self.active,
            "method": self.method,
            "variant_a_countries": sorted(self.variant_a_countries),
            "variant_b_countries": sorted(self.variant_b_countries),
        }


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def sanitize_campaign(
        raw: Mapping[str, Any],
        is_published: Optional[Callable[[int], bool]] = None,
        ) -> CampaignConfig:
    """Coerce raw settings into a consistent :class:`CampaignConfig`.

    Args:
        raw: Mapping with the keys of :meth:`CampaignConfig.to_dict`.
            Missing or malformed values fall back to their defaults.
        is_published: Optional predicate telling whether a page id is a
            published page.  Variants failing it are reset to ``0``.

    Returns:
        The sanitized configuration.  ``active`` is forced to False when the
        page ids do not form a valid campaign.
    """
    original = _as_int(raw.get("original_page_id"))
    if original == -1:
        # "nothing selected" in the admin picker
        original = HOME_PAGE_ID

    variant_ids = []
    for key in ("variant_a_page_id", "variant_b_page_id"):
        page_id = _as_int(raw.get(key))
        if page_id > 0 and is_published is not None and not is_published(page_id):
            page_id = 0
        variant_ids.append(page_id)

    method = str(raw.get("method") or "random").strip()
    if method not in REDIRECT_METHODS:
        method = "random"

    config = CampaignConfig(
        original_page_id=original,
        variant_a_page_id=variant_ids[0],
        variant_b_page_id=variant_ids[1],
        active=bool(_as_int(raw.get("active"))),
        method=method,  # type: ignore[arg-type]
        variant_a_countries=frozenset(supported_codes(raw.get("variant_a_countries") or [])),
        variant_b_countries=frozenset(supported_codes(raw.get("variant_b_countries") or [])),
    )
    if config.active and not config.has_valid_pages():
        config = replace(config, active=False)
    return config


__all__ = [
    "CampaignConfig",
    "RedirectMethod",
    "HOME_PAGE_ID",
    "REDIRECT_METHODS",
    "sanitize_campaign",
]
