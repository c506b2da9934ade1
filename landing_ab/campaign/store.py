"""Persistence of the single campaign configuration.

The store is the only writer of the campaign row.  Every write goes through
:func:`~landing_ab.campaign.sanitize_campaign`, so readers always receive a
configuration whose ``active`` flag implies three distinct, usable page ids.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from landing_ab.campaign import CampaignConfig, sanitize_campaign
from landing_ab.pages import PageDirectory

LOGGER = logging.getLogger(__name__)

_ROW_ID = 1


def _join_codes(codes: Iterable[str]) -> str:
    return ",".join(sorted(codes))


def _split_codes(value: Optional[str]) -> list[str]:
    return [c for c in (value or "").split(",") if c]


class CampaignSettingsStore:
    """Read and write the campaign configuration through SQLAlchemy."""

    def __init__(self, engine: Engine, pages: Optional[PageDirectory] = None) -> None:
        self._engine = engine
        self._pages = pages

    def get_active_config(self) -> CampaignConfig:
        """Return the stored configuration, or the defaults if none is saved."""
        with self._engine.connect() as conn:
            row = conn.execute(
                text(
                    """
                    SELECT original_page_id, variant_a_page_id, variant_b_page_id,
                           active, method, variant_a_countries, variant_b_countries
                      FROM campaign_settings WHERE id = :id
                    """
                ),
                {"id": _ROW_ID},
            ).mappings().fetchone()
        if row is None:
            return CampaignConfig()
        # Rows are written sanitized; re-sanitizing guards against manual edits.
        return sanitize_campaign(
            {
                **row,
                "variant_a_countries": _split_codes(row["variant_a_countries"]),
                "variant_b_countries": _split_codes(row["variant_b_countries"]),
            }
        )

    def save(self, raw: Mapping[str, Any]) -> CampaignConfig:
        """Sanitize ``raw`` and persist it.

        Args:
            raw: Admin input with the keys of :meth:`CampaignConfig.to_dict`.

        Returns:
            The configuration as stored.  It may be inactive even if
            ``raw["active"]`` was true.
        """
        is_published = self._pages.is_published if self._pages is not None else None
        config = sanitize_campaign(raw, is_published)
        if raw.get("active") and not config.active:
            LOGGER.warning(
                "campaign saved inactive: page ids %s are incomplete or not distinct",
                config.page_ids,
            )
        self._write(config)
        return config

    def set_active(self, active: bool) -> CampaignConfig:
        """Start or stop the campaign.

        Starting re-sanitizes the stored settings, so a campaign with invalid
        pages stays inactive.  Stopping only clears the flag.
        """
        current = self.get_active_config()
        if active:
            return self.save({**current.to_dict(), "active": True})
        config = replace(current, active=False)
        self._write(config)
        return config

    def _write(self, config: CampaignConfig) -> None:
        params = {
            "id": _ROW_ID,
            "original_page_id": config.original_page_id,
            "variant_a_page_id": config.variant_a_page_id,
            "variant_b_page_id": config.variant_b_page_id,
            "active": int(config.active),
            "method": config.method,
            "variant_a_countries": _join_codes(config.variant_a_countries),
            "variant_b_countries": _join_codes(config.variant_b_countries),
        }
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM campaign_settings WHERE id = :id"), {"id": _ROW_ID})
            conn.execute(
                text(
                    """
                    INSERT INTO campaign_settings
                    (id, original_page_id, variant_a_page_id, variant_b_page_id,
                     active, method, variant_a_countries, variant_b_countries)
                    VALUES (:id, :original_page_id, :variant_a_page_id, :variant_b_page_id,
                            :active, :method, :variant_a_countries, :variant_b_countries)
                    """
                ),
                params,
            )
        LOGGER.info(
            "campaign saved: original=%s a=%s b=%s method=%s active=%s",
            config.original_page_id,
            config.variant_a_page_id,
            config.variant_b_page_id,
            config.method,
            config.active,
        )


__all__ = ["CampaignSettingsStore"]
