import httpx
import pytest

from campaign_dashboard.services.media import MediaClient, find_media_for_creative
from campaign_dashboard.services.sheets import (
    SheetsClient,
    SheetsConfigurationError,
    SheetsFetchError,
)


class TestSheetsClient:
    @pytest.mark.asyncio
    async def test_fetch_range_reads_nested_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["range"] = request.url.params.get("range")
            return httpx.Response(200, json={"data": {"values": [["Date", "Cost"], ["15/01/2025", "1,00"]]}})

        client = SheetsClient("http://sheets.test", "sheet-1", transport=httpx.MockTransport(handler))
        table = await client.fetch_range("Pinterest_tratado")

        assert seen == {"path": "/google/sheets/sheet-1/data", "range": "Pinterest_tratado"}
        assert table.headers == ("Date", "Cost")
        assert table.rows == (("15/01/2025", "1,00"),)

    @pytest.mark.asyncio
    async def test_spreadsheet_override(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/google/sheets/bench/data"
            return httpx.Response(200, json={"values": []})

        client = SheetsClient("http://sheets.test", "sheet-1", transport=httpx.MockTransport(handler))
        table = await client.fetch_range("BENCHMARK", spreadsheet_id="bench")
        assert table.headers == ()

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="backend down"))
        client = SheetsClient("http://sheets.test", "sheet-1", transport=transport)

        with pytest.raises(SheetsFetchError) as exc:
            await client.fetch_range("Pinterest_tratado")
        assert "500" in str(exc.value)
        assert "backend down" in str(exc.value)

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        client = SheetsClient("http://sheets.test", "sheet-1", transport=transport)

        with pytest.raises(SheetsFetchError):
            await client.fetch_range("Pinterest_tratado")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = SheetsClient("http://sheets.test", "sheet-1", transport=httpx.MockTransport(handler))
        with pytest.raises(SheetsFetchError):
            await client.fetch_range("Pinterest_tratado")

    @pytest.mark.asyncio
    async def test_missing_spreadsheet_id(self):
        client = SheetsClient("http://sheets.test", "")
        with pytest.raises(SheetsConfigurationError):
            await client.fetch_range("Pinterest_tratado")


class TestMediaLookup:
    MEDIA = {
        "Ad": {"url": "https://cdn/ad.png", "type": "image"},
        "Ad 1": {"url": "https://cdn/ad1.mp4", "type": "video"},
    }

    def test_exact_match_wins(self):
        assert find_media_for_creative("ad 1", self.MEDIA) == {"url": "https://cdn/ad1.mp4", "type": "video"}

    def test_substring_either_direction(self):
        assert find_media_for_creative("Ad 1 - versão 2", {"ad 1": {"url": "u", "type": "video"}})["url"] == "u"
        assert find_media_for_creative("Verão", {"Campanha Verão 2025": {"url": "v", "type": "image"}})["url"] == "v"

    @pytest.mark.parametrize("name", [None, "", "   ", "Unrelated"])
    def test_no_match(self, name):
        assert find_media_for_creative(name, {"something": {"url": "u", "type": "image"}}) is None

    @pytest.mark.asyncio
    async def test_client_parses_media_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/media/pinterest"
            return httpx.Response(
                200,
                json={"media": {"Ad 1": {"url": "https://cdn/ad1.mp4", "type": "video"}, "broken": {"type": "image"}}},
            )

        client = MediaClient("http://media.test", transport=httpx.MockTransport(handler))
        assert await client.get_platform_media("pinterest") == {"Ad 1": {"url": "https://cdn/ad1.mp4", "type": "video"}}

    @pytest.mark.asyncio
    async def test_client_failures_are_soft(self):
        client = MediaClient("http://media.test", transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        assert await client.get_platform_media("meta") == {}
        assert await MediaClient(None).get_platform_media("meta") == {}
