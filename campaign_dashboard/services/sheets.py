"""Client for the spreadsheet proxy API that serves the dashboard feeds."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import settings
from .pipeline.table import RawTable

logger = logging.getLogger(__name__)


class SheetsError(Exception):
    pass


class SheetsFetchError(SheetsError):
    pass


class SheetsConfigurationError(SheetsError):
    pass


class SheetsClient:
    """
    Fetches one named range of a spreadsheet as a RawTable.

    No retries: a failed fetch surfaces as SheetsFetchError and the caller
    reloads manually.
    """

    def __init__(
        self,
        base_url: str,
        spreadsheet_id: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.spreadsheet_id = spreadsheet_id
        self.timeout = timeout
        self._transport = transport

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise SheetsFetchError(f"Sheets request failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            text = response.text[:200]
            raise SheetsFetchError(f"Sheets API error ({response.status_code}): {text}")

        try:
            return response.json()
        except ValueError as exc:
            raise SheetsFetchError("Sheets API returned invalid JSON") from exc

    async def fetch_range(self, range_name: str, *, spreadsheet_id: str | None = None) -> RawTable:
        sheet_id = spreadsheet_id or self.spreadsheet_id
        if not sheet_id:
            raise SheetsConfigurationError("SHEETS_SPREADSHEET_ID not set")

        payload = await self._get_json(f"/google/sheets/{sheet_id}/data", {"range": range_name})
        table = RawTable.from_payload(payload)
        if not table.headers:
            logger.warning("Sheets range %s returned no header row", range_name)
        return table


def get_sheets_client() -> SheetsClient:
    return SheetsClient(
        base_url=settings.sheets_api_base_url,
        spreadsheet_id=settings.sheets_spreadsheet_id,
        timeout=settings.sheets_timeout_seconds,
    )
