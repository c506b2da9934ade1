import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from landing_ab.campaign import CampaignConfig
from landing_ab.campaign.store import CampaignSettingsStore
from landing_ab.config import Settings
from landing_ab.db import get_engine
from landing_ab.geo import GeoResolver
from landing_ab.pages import Page, PageDirectory, StaticPageDirectory
from landing_ab.web.server import create_app

ASSIGN = "landing_ab_assign_10"
CAMPAIGN = {
    "original_page_id": 10,
    "variant_a_page_id": 11,
    "variant_b_page_id": 12,
    "active": True,
    "method": "random",
}
TARGETS = {"a": "/sale/v1", "b": "/sale/v2"}


class FakeGeo(GeoResolver):
    def __init__(self, country: Optional[str]) -> None:
        self.country = country

    def is_available(self) -> bool:
        return True

    def resolve_country(self, ip: str) -> Optional[str]:
        return self.country


class BrokenStore(CampaignSettingsStore):
    def get_active_config(self) -> CampaignConfig:
        raise RuntimeError("settings database is down")


def _pages() -> StaticPageDirectory:
    return StaticPageDirectory([
        Page(10, "Sale", "/sale"),
        Page(11, "Sale A", "/sale/v1"),
        Page(12, "Sale B", "/sale/v2"),
    ])


def _client(tmp_path: Path, geo: Optional[GeoResolver] = None,
            store_cls: type = CampaignSettingsStore,
            pages: Optional[PageDirectory] = None,
            site_url: Optional[str] = None) -> TestClient:
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'settings.db'}",
                        geoip_db=tmp_path / "missing.mmdb", site_url=site_url)
    pages = pages or _pages()
    store = store_cls(get_engine(settings.database_url), pages)
    app = create_app(settings, store=store, pages=pages,
                     geo=geo or FakeGeo(None), rng=random.Random(5))
    return TestClient(app)


def test_random_campaign_is_sticky(tmp_path: Path) -> None:
    client = _client(tmp_path)
    assert client.post("/admin/campaign", json=CAMPAIGN).json()["active"] is True

    first = client.get("/sale", follow_redirects=False)
    assert first.status_code == 302
    assert ASSIGN in first.headers["set-cookie"]
    variant = client.cookies.get(ASSIGN)
    assert variant in ("a", "b")
    assert first.headers["location"] == TARGETS[variant]

    for _ in range(5):
        again = client.get("/sale", follow_redirects=False)
        assert again.status_code == 302
        assert again.headers["location"] == TARGETS[variant]
        assert "set-cookie" not in again.headers


def test_variant_page_is_served(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json=CAMPAIGN)
    response = client.get("/sale/v1", follow_redirects=False)
    assert response.status_code == 200
    assert "Sale A" in response.text
    assert "set-cookie" not in response.headers


def test_inactive_campaign_serves_original(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json={**CAMPAIGN, "active": False})
    response = client.get("/sale", follow_redirects=False)
    assert response.status_code == 200
    assert "Sale" in response.text


def test_duplicate_pages_are_saved_inactive(tmp_path: Path) -> None:
    client = _client(tmp_path)
    body = client.post("/admin/campaign", json={**CAMPAIGN, "variant_b_page_id": 11}).json()
    assert body["active"] is False
    assert client.get("/sale", follow_redirects=False).status_code == 200


def test_stop_clears_assignment_idempotently(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json=CAMPAIGN)
    client.get("/sale", follow_redirects=False)
    assert client.cookies.get(ASSIGN) in ("a", "b")

    stopped = client.post("/admin/campaign/toggle", json={"toggle": "stop"})
    assert stopped.status_code == 200
    assert stopped.json()["active"] is False
    assert "max-age=0" in stopped.headers["set-cookie"].lower()
    assert client.cookies.get(ASSIGN) is None

    again = client.post("/admin/campaign/toggle", json={"toggle": "stop"})
    assert again.status_code == 200
    assert "set-cookie" not in again.headers
    assert client.cookies.get(ASSIGN) is None

    assert client.get("/sale", follow_redirects=False).status_code == 200

    started = client.post("/admin/campaign/toggle", json={"toggle": "start"})
    assert started.json()["active"] is True
    assert client.get("/sale", follow_redirects=False).status_code == 302


def test_saving_inactive_clears_assignment(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json=CAMPAIGN)
    client.get("/sale", follow_redirects=False)
    client.post("/admin/campaign", json={**CAMPAIGN, "active": False})
    assert client.cookies.get(ASSIGN) is None


def test_toggle_rejects_unknown_action(tmp_path: Path) -> None:
    client = _client(tmp_path)
    assert client.post("/admin/campaign/toggle", json={"toggle": "pause"}).status_code == 422


def test_admin_configuration_has_labels(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json={**CAMPAIGN, "method": "geo",
                                         "variant_a_countries": ["de"]})
    body = client.get("/admin/campaign").json()
    assert body["method"] == "geo"
    assert body["variant_a_countries"] == ["DE"]
    assert body["labels"]["original"] == "Sale (/sale)"
    assert body["labels"]["variant_a_countries"] == ["Germany (DE)"]
    assert body["labels"]["status"] == "Active"
    assert [p["page_id"] for p in body["pages"]] == [10, 11, 12]


def test_admin_paths_are_not_redirected(tmp_path: Path) -> None:
    pages = _pages()
    pages.add(Page(20, "Console", "/admin/console"))
    client = _client(tmp_path, pages=pages)
    client.post("/admin/campaign", json={**CAMPAIGN, "original_page_id": 20})
    assert client.get("/admin/campaign").json()["active"] is True

    response = client.get("/admin/console", follow_redirects=False)
    assert response.status_code == 200
    assert "Console" in response.text
    assert "set-cookie" not in response.headers


def test_redirect_ignores_host_header(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json=CAMPAIGN)
    response = client.get("/sale", headers={"Host": "evil.example"},
                          follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] in TARGETS.values()
    assert "evil.example" not in response.headers["location"]


def test_redirect_uses_configured_site_url(tmp_path: Path) -> None:
    client = _client(tmp_path, site_url="https://shop.example")
    client.post("/admin/campaign", json=CAMPAIGN)
    response = client.get("/sale", headers={"Host": "evil.example"},
                          follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] in {
        "https://shop.example" + path for path in TARGETS.values()
    }


class FailingPathLookup(StaticPageDirectory):
    def find_by_path(self, path: str) -> Optional[Page]:
        raise RuntimeError("page table is locked")


class FailingTitleLookup(StaticPageDirectory):
    def __init__(self, pages: List[Page]) -> None:
        super().__init__(pages)
        self.fail = False

    def get_page(self, page_id: int) -> Optional[Page]:
        if self.fail:
            raise RuntimeError("page table is locked")
        return super().get_page(page_id)


def test_page_lookup_failure_returns_503(tmp_path: Path) -> None:
    pages = FailingPathLookup([Page(10, "Sale", "/sale")])
    client = _client(tmp_path, pages=pages)
    response = client.get("/sale", follow_redirects=False)
    assert response.status_code == 503
    assert "set-cookie" not in response.headers


def test_title_lookup_failure_still_serves_page(tmp_path: Path) -> None:
    pages = FailingTitleLookup([
        Page(10, "Sale", "/sale"),
        Page(11, "Sale A", "/sale/v1"),
        Page(12, "Sale B", "/sale/v2"),
    ])
    client = _client(tmp_path, pages=pages)
    client.post("/admin/campaign", json={**CAMPAIGN, "active": False})
    pages.fail = True
    response = client.get("/sale", follow_redirects=False)
    assert response.status_code == 200


@pytest.mark.parametrize("country, status", [("DE", 302), ("IT", 200)])
def test_geo_campaign(tmp_path: Path, country: str, status: int) -> None:
    client = _client(tmp_path, geo=FakeGeo(country))
    client.post("/admin/campaign", json={**CAMPAIGN, "method": "geo",
                                         "variant_a_countries": ["DE"],
                                         "variant_b_countries": ["FR"]})
    response = client.get("/sale", headers={"X-Forwarded-For": "81.2.69.160"},
                          follow_redirects=False)
    assert response.status_code == status
    if status == 302:
        assert response.headers["location"] == "/sale/v1"
    assert client.cookies.get("landing_ab_country_10") == country
    assert client.cookies.get(ASSIGN) is None


def test_geo_failure_serves_original(tmp_path: Path) -> None:
    client = _client(tmp_path, geo=FakeGeo(None))
    client.post("/admin/campaign", json={**CAMPAIGN, "method": "geo",
                                         "variant_a_countries": ["DE"]})
    response = client.get("/sale", follow_redirects=False)
    assert response.status_code == 200
    assert "set-cookie" not in response.headers


def test_logout_clears_assignment(tmp_path: Path) -> None:
    client = _client(tmp_path)
    client.post("/admin/campaign", json=CAMPAIGN)
    client.get("/sale", follow_redirects=False)
    assert client.post("/logout").status_code == 204
    assert client.cookies.get(ASSIGN) is None


def test_unknown_page_is_404(tmp_path: Path) -> None:
    assert _client(tmp_path).get("/nope").status_code == 404


def test_failures_fail_open(tmp_path: Path) -> None:
    client = _client(tmp_path, store_cls=BrokenStore)
    response = client.get("/sale", follow_redirects=False)
    assert response.status_code == 200
    assert "Sale" in response.text
