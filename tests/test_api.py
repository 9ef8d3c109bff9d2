"""
Tests for the FastAPI control endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from inci_scraper import main
from inci_scraper.adapters.firecrawl_client import FirecrawlClient
from inci_scraper.config import Config
from inci_scraper.exceptions import FetchError
from inci_scraper.layers.scraper_service import ScraperService

from tests.conftest import PRODUCT_URL, SITE, FakeClient, fast_settings


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def api(monkeypatch, fake_client):
    service = ScraperService(client_factory=lambda: fake_client, settings_factory=fast_settings)
    monkeypatch.setattr(main, "scraper_service", service)
    return TestClient(main.app)


class TestHealth:

    def test_health(self, api):
        response = api.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestStart:

    def test_end_before_start_is_bad_request(self, api):
        response = api.post("/api/scraper/start", json={"startOffset": 3, "endOffset": 1})
        assert response.status_code == 400
        assert "endOffset" in response.json()["detail"]

    def test_negative_offset_fails_validation(self, api):
        response = api.post("/api/scraper/start", json={"startOffset": -1})
        assert response.status_code == 422

    def test_zero_product_limit_fails_validation(self, api):
        response = api.post("/api/scraper/start", json={"productLimitPerPage": 0})
        assert response.status_code == 422

    def test_missing_api_key_is_service_unavailable(self, monkeypatch):
        monkeypatch.setattr(Config, "FIRECRAWL_API_KEY", "")
        service = ScraperService(client_factory=FirecrawlClient, settings_factory=fast_settings)
        monkeypatch.setattr(main, "scraper_service", service)

        response = TestClient(main.app).post("/api/scraper/start", json={})
        assert response.status_code == 503
        assert "FIRECRAWL_API_KEY" in response.json()["detail"]


class TestStatusAndControl:

    def test_idle_status(self, api):
        data = api.get("/api/scraper/status").json()
        assert data["phase"] == "idle"
        assert data["isRunning"] is False
        assert data["isPaused"] is False
        assert data["progress"] == {"current": 0, "total": 0, "phase": "Idle"}

    def test_pause_when_idle(self, api):
        assert api.post("/api/scraper/pause").json() == {"isPaused": False, "isRunning": False}

    def test_reset(self, api):
        data = api.post("/api/scraper/reset").json()
        assert data["phase"] == "idle"
        assert data["productCount"] == 0

    def test_empty_collections(self, api):
        assert api.get("/api/scraper/products").json() == []
        assert api.get("/api/scraper/pages").json() == []
        assert api.get("/api/scraper/logs").json() == []


class TestExport:

    def test_export_all_is_a_download(self, api):
        response = api.get("/api/scraper/export")
        assert response.status_code == 200
        assert response.json() == []
        disposition = response.headers["content-disposition"]
        assert 'filename="incidecoder-products-' in disposition
        assert "X-Export-Path" not in response.headers

    def test_export_saved_to_disk(self, api, monkeypatch, tmp_path):
        monkeypatch.setattr(Config, "EXPORT_DIR", str(tmp_path))
        response = api.get("/api/scraper/export", params={"save": "true"})
        assert response.headers["x-export-path"].startswith(str(tmp_path))

    def test_unknown_page_is_not_found(self, api):
        assert api.get("/api/scraper/export/40").status_code == 404


class TestOneOffEndpoints:

    def test_scrape_product(self, api, fake_client):
        response = api.post("/api/scraper/scrape-product", json={"url": PRODUCT_URL})
        assert response.status_code == 200
        data = response.json()
        assert data["url"] == PRODUCT_URL
        assert data["ingredientsOverviewCount"] == 2
        assert data["skinThroughCount"] == 2

    def test_scrape_product_upstream_failure(self, api, fake_client):
        fake_client.errors[PRODUCT_URL] = FetchError(500, "upstream down", url=PRODUCT_URL)
        response = api.post("/api/scraper/scrape-product", json={"url": PRODUCT_URL})
        assert response.status_code == 502
        assert response.json()["detail"] == "upstream down"

    def test_map_products(self, api):
        data = api.post("/api/scraper/map-products", json={"limit": 10}).json()
        assert data == {"products": [f"{SITE}/products/a", f"{SITE}/products/c"], "total": 2}
