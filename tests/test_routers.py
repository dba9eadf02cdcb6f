import io
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from campaign_dashboard.config import settings
from campaign_dashboard.main import app
from campaign_dashboard.services.media import get_media_client
from campaign_dashboard.services.pipeline import RawTable
from campaign_dashboard.services.sheets import SheetsFetchError, get_sheets_client

SHEETS = {
    "Pinterest_tratado": [
        ["Date", "Campaign name", "Ad group name", "Ad name", "Impressions", "Clicks", "Cost"],
        ["15/01/2025", "Campaign A", "Group A", "Ad Residencial 1", "1000", "50", "100,50"],
        ["16/01/2025", "Campaign A", "Group A", "Ad Residencial 1", "2000", "10", "10,00"],
        ["17/01/2025", "Campaign B", "Group B", "Ad Vida 2", "500", "5", "5,00"],
    ],
    "Eventos_Receptivos": [
        ["Date", "Event name", "Event count", "Link URL", "Modalidade"],
        ["01/12/2025", "internal_link_click", "10", "https://wa.me/55", "Residencial"],
        ["02/12/2025", "btn_whatsapp_fundo", "3", "", "Residencial"],
        ["03/12/2025", "botao-cta", "4", "", "Residencial"],
    ],
    "GA4_receptivos": [
        ["Date", "Session source", "Region", "Sessions", "New users"],
        ["01/12/2025", "meta", "State of Sao Paulo", "30", "10"],
        ["01/12/2025", "google", "Ceara", "10", "5"],
    ],
    "BENCHMARK": [
        ["Veículo", "Modelo", "CPM", "CPC", "Impressões", "Cliques", "Custo", "CTR", "VTR"],
        ["Meta", "CPM", "10,00", "0,50", "1.000", "20", "10", "0,80", "25"],
    ],
}


class FakeSheets:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def fetch_range(self, range_name, *, spreadsheet_id=None):
        self.calls.append((range_name, spreadsheet_id))
        if self.error:
            raise self.error
        return RawTable.from_values(SHEETS.get(range_name, []))


class FakeMedia:
    async def get_platform_media(self, platform):
        return {"Ad Residencial": {"url": f"https://cdn/{platform}.png", "type": "image"}}


@pytest.fixture
def sheets():
    fake = FakeSheets()
    app.dependency_overrides[get_sheets_client] = lambda: fake
    app.dependency_overrides[get_media_client] = lambda: FakeMedia()
    yield fake
    app.dependency_overrides = {}


client = TestClient(app)


def test_healthz():
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_list_feeds():
    names = [f["name"] for f in client.get("/creatives/feeds").json()["feeds"]]
    assert names == ["pinterest", "google_search", "meta_ad"]


def test_feed_dashboard(sheets):
    response = client.get("/creatives/pinterest")

    assert response.status_code == 200
    body = response.json()
    assert body["total_records"] == 2
    assert body["total_pages"] == 1
    assert body["records"][0]["ad_name"] == "Ad Residencial 1"
    assert body["records"][0]["impressions"] == 3000
    assert body["totals"]["impressions"] == 3500
    assert body["date_range"] == {"start": "2025-01-15", "end": "2025-01-17"}
    assert body["available_categories"] == ["residencial", "vida"]
    assert sheets.calls == [("Pinterest_tratado", None)]


def test_feed_dashboard_filters_and_media(sheets):
    response = client.get(
        "/creatives/pinterest",
        params={"categories": "vida,residencial", "start": "2025-01-17", "end": "2025-01-31", "with_media": "true"},
    )
    body = response.json()
    assert [r["ad_name"] for r in body["records"]] == ["Ad Vida 2"]
    assert body["records"][0]["media"] is None

    media = client.get("/creatives/pinterest", params={"with_media": "true"}).json()
    assert media["records"][0]["media"] == {"url": "https://cdn/pinterest.png", "type": "image"}


def test_unknown_feed(sheets):
    assert client.get("/creatives/tiktok").status_code == 404


def test_page_size_is_bounded(sheets):
    assert client.get("/creatives/pinterest", params={"page_size": 0}).status_code == 422


def test_sheet_failure_is_bad_gateway():
    app.dependency_overrides[get_sheets_client] = lambda: FakeSheets(SheetsFetchError("Sheets API error (500): boom"))
    try:
        response = client.get("/creatives/pinterest")
    finally:
        app.dependency_overrides = {}
    assert response.status_code == 502
    assert "Pinterest_tratado" in response.json()["detail"]


def test_unhandled_error_is_logged():
    app.dependency_overrides[get_sheets_client] = lambda: FakeSheets(RuntimeError("unexpected"))
    try:
        with patch("campaign_dashboard.main.error_logger") as error_logger:
            response = TestClient(app, raise_server_exceptions=False).get("/creatives/pinterest")
    finally:
        app.dependency_overrides = {}
    assert response.status_code == 500
    payload = error_logger.log.call_args[0][0]
    assert payload["route"] == "/creatives/pinterest"
    assert payload["message"] == "unexpected"


def test_export(sheets):
    response = client.get("/creatives/pinterest/export")

    assert response.status_code == 200
    assert "pinterest_" in response.headers["content-disposition"]
    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws.title == "Pinterest creatives"
    assert ws.cell(row=1, column=1).value == "First date"
    assert ws.cell(row=2, column=4).value == "Ad Residencial 1"
    assert ws.cell(row=4, column=1).value == "Total"


def test_events_ranking(sheets):
    body = client.get("/events/ranking").json()

    assert body["cutoff"] == settings.whatsapp_cutoff_date
    assert body["counts"]["btn_whatsapp_flutuante"] == 7
    assert body["available_modalities"] == ["Residencial"]
    whatsapp = next(c for c in body["categories"] if c["id"] == "whatsapp")
    assert [i["id"] for i in whatsapp["items"]] == ["btn_whatsapp_flutuante", "btn_whatsapp_fundo"]


def test_traffic_sessions(sheets):
    body = client.get("/traffic/sessions", params={"start": "2025-12-01", "end": "2025-12-31"}).json()

    assert body["total_sessions"] == 40
    assert body["ctas"] == {"bb_track": 4, "first_visit": 15, "total_ctas": 19}
    assert body["available_sources"] == ["google", "meta"]
    assert body["available_regions"] == ["Ceara", "State of Sao Paulo"]


def test_benchmark_endpoints(sheets):
    body = client.get("/benchmark").json()
    assert list(body["benchmarks"]) == ["META_cpm"]
    assert sheets.calls[0][1] == settings.benchmark_spreadsheet_id

    compare = client.get("/benchmark/compare", params={"vehicle": "meta", "modality": "cpm", "cpm": 8}).json()
    assert compare["variations"] == {"cpm": {"value": "-2.00", "better": True}}

    missing = client.get("/benchmark/compare", params={"vehicle": "tiktok", "modality": "cpm"})
    assert missing.status_code == 404
