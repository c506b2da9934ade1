"""Web server performing the landing page A/B redirect.

This module exposes the page-view route that runs the variant decision
engine, plus a small JSON back-office API to save, start and stop the
campaign.  Authorization of the back-office routes is left to the host (a
reverse proxy or an authenticating middleware).  The server can be run
standalone::

    uvicorn landing_ab.web.server:create_app --factory --reload

or through :mod:`landing_ab.app`.
"""

from __future__ import annotations

import logging
import random
from html import escape
from typing import List, Literal, Optional

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from landing_ab.ab_testing.assignment import StickyAssignmentStore
from landing_ab.ab_testing.cookies import CookieJar
from landing_ab.ab_testing.engine import (
    NoRedirect,
    PageRequest,
    RedirectDecision,
    RedirectTo,
    VariantDecisionEngine,
)
from landing_ab.campaign import CampaignConfig, HOME_PAGE_ID
from landing_ab.campaign.countries import format_country_codes
from landing_ab.campaign.store import CampaignSettingsStore
from landing_ab.config import Settings, load_settings
from landing_ab.db import get_engine
from landing_ab.geo import GeoResolver
from landing_ab.geo.maxmind import MaxMindCountryResolver
from landing_ab.pages import PageDirectory
from landing_ab.pages.sql_directory import SqlPageDirectory

LOGGER = logging.getLogger(__name__)


class CampaignForm(BaseModel):
    original_page_id: int = -1
    variant_a_page_id: int = 0
    variant_b_page_id: int = 0
    active: bool = False
    method: str = "random"
    variant_a_countries: List[str] = []
    variant_b_countries: List[str] = []


class ToggleRequest(BaseModel):
    toggle: Literal["start", "stop"]


def _cookie_jar(request: Request, settings: Settings) -> CookieJar:
    return CookieJar(
        request.cookies,
        secure=request.url.scheme == "https",
        path=settings.cookie_path,
        domain=settings.cookie_domain,
    )


def _base_url(request: Request, settings: Settings) -> str:
    """Return the prefix of redirect targets.

    The configured site URL when set, otherwise only the mount point, which
    yields root-relative ``Location`` headers.  The ``Host`` header is client
    controlled and never used.
    """
    return settings.site_url or request.scope.get("root_path", "")


def _describe(config: CampaignConfig, pages: PageDirectory) -> dict:
    """Return the configuration with labels for display."""
    return {
        **config.to_dict(),
        "labels": {
            "original": pages.label_for_page(config.original_page_id),
            "variant_a": pages.label_for_page(config.variant_a_page_id),
            "variant_b": pages.label_for_page(config.variant_b_page_id),
            "variant_a_countries": format_country_codes(sorted(config.variant_a_countries)),
            "variant_b_countries": format_country_codes(sorted(config.variant_b_countries)),
            "status": "Active" if config.active else "Inactive",
        },
    }


def _page_title(pages: PageDirectory, page_id: int) -> str:
    if page_id == HOME_PAGE_ID:
        return "Home"
    try:
        page = pages.get_page(page_id)
    except Exception:
        LOGGER.exception("title lookup failed for page %s", page_id)
        return ""
    return page.title if page else ""


def _render_page(title: str) -> HTMLResponse:
    body = (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        f"<body><h1>{escape(title)}</h1></body></html>"
    )
    return HTMLResponse(body)


def create_app(
        settings: Optional[Settings] = None,
        store: Optional[CampaignSettingsStore] = None,
        pages: Optional[PageDirectory] = None,
        geo: Optional[GeoResolver] = None,
        rng: Optional[random.Random] = None,
        ) -> FastAPI:
    """Build the FastAPI application.

    Collaborators default to the ones described by ``settings`` (itself
    read from the environment): the SQL settings store and page directory,
    and the MaxMind resolver.  Tests pass in-memory replacements.
    """
    settings = settings or load_settings()
    if pages is None or store is None:
        db_engine = get_engine(settings.database_url)
        pages = pages or SqlPageDirectory(db_engine)
        store = store or CampaignSettingsStore(db_engine, pages)
    geo = geo or MaxMindCountryResolver(settings.geoip_db)
    decision_engine = VariantDecisionEngine(pages, geo, rng)

    app = FastAPI(title="Landing A/B Test")
    app.state.settings = settings
    app.state.store = store
    app.state.pages = pages
    app.state.decision_engine = decision_engine

    admin = APIRouter(prefix=settings.admin_prefix.rstrip("/"))

    @admin.get("/campaign", summary="Current campaign configuration")
    async def get_campaign() -> JSONResponse:
        body = _describe(store.get_active_config(), pages)
        # choices for the page pickers; 0 is the home page
        body["pages"] = [
            {"page_id": p.page_id, "label": pages.label_for_page(p.page_id)}
            for p in pages.published_pages()
        ]
        return JSONResponse(body)

    @admin.post("/campaign", summary="Save campaign configuration")
    async def save_campaign(request: Request, form: CampaignForm) -> JSONResponse:
        """Save the campaign; an inactive result clears the visitor's assignment."""
        config = store.save(form.model_dump())
        jar = _cookie_jar(request, settings)
        if not config.active:
            StickyAssignmentStore(jar).clear(config.original_page_id)
        return jar.apply(JSONResponse(_describe(config, pages)))

    @admin.post("/campaign/toggle", summary="Start or stop the campaign")
    async def toggle_campaign(request: Request, body: ToggleRequest) -> JSONResponse:
        jar = _cookie_jar(request, settings)
        if body.toggle == "start":
            config = store.set_active(True)
        else:
            config = store.set_active(False)
            StickyAssignmentStore(jar).clear(config.original_page_id)
        LOGGER.info("campaign %s requested; active=%s", body.toggle, config.active)
        return jar.apply(JSONResponse(_describe(config, pages)))

    app.include_router(admin)

    @app.post("/logout", summary="Forget the visitor's assignment")
    async def logout(request: Request) -> Response:
        jar = _cookie_jar(request, settings)
        config = store.get_active_config()
        if config.original_page_id != HOME_PAGE_ID:
            StickyAssignmentStore(jar).clear(config.original_page_id)
        return jar.apply(Response(status_code=204))

    @app.get("/{path:path}", summary="Serve a page or redirect to a variant")
    async def page_view(request: Request, path: str) -> Response:
        """Run the decision engine, then redirect or serve the page."""
        try:
            page_id = pages.page_id_for_path("/" + path)
        except Exception:
            # without the page there is nothing to fall back to
            LOGGER.exception("page lookup failed for %s", request.url.path)
            return PlainTextResponse("Service Unavailable", status_code=503)
        page_request = PageRequest(
            page_id=page_id,
            base_url=_base_url(request, settings),
            headers=dict(request.headers),
            remote_addr=request.client.host if request.client else None,
            is_admin=settings.is_admin_path(request.url.path),
        )
        jar = _cookie_jar(request, settings)
        decision: RedirectDecision
        try:
            decision = decision_engine.decide(page_request, store.get_active_config(), jar)
        except Exception:
            # Serve the original page on any unexpected failure.
            LOGGER.exception("redirect decision failed for %s", request.url.path)
            decision = NoRedirect("internal error")
            jar = _cookie_jar(request, settings)

        if isinstance(decision, RedirectTo):
            return jar.apply(RedirectResponse(decision.url, status_code=decision.status))

        if page_id is None:
            return jar.apply(PlainTextResponse("Not Found", status_code=404))
        return jar.apply(_render_page(_page_title(pages, page_id)))

    return app


__all__ = ["create_app", "CampaignForm", "ToggleRequest"]
