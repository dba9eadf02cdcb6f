"""Creative media lookup (thumbnails / videos kept in an external media store)."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

MediaRef = dict[str, str]


def find_media_for_creative(name: Any, media_map: Mapping[str, Mapping[str, Any]]) -> Optional[MediaRef]:
    """
    Media for a creative name: case-insensitive exact key first, then a key
    contained in the name (or the name contained in a key). None when absent.
    """
    if not name or not media_map:
        return None
    target = str(name).strip().lower()
    if not target:
        return None

    lowered = [(str(k).strip().lower(), v) for k, v in media_map.items()]

    for key, ref in lowered:
        if key == target:
            return _as_ref(ref)
    for key, ref in lowered:
        if key and (key in target or target in key):
            return _as_ref(ref)
    return None


def _as_ref(ref: Mapping[str, Any]) -> MediaRef:
    return {"url": str(ref.get("url", "")), "type": str(ref.get("type", ""))}


class MediaClient:
    """Fetches `{creative name: {url, type}}` for one platform from the media store."""

    def __init__(
        self,
        base_url: str | None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    async def get_platform_media(self, platform: str) -> dict[str, MediaRef]:
        # missing media only shows a placeholder, so every failure here is soft
        if not self.base_url:
            return {}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            ) as client:
                response = await client.get(f"/media/{platform}")
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Media lookup for %s failed: %s", platform, exc)
            return {}

        items = payload.get("media", payload) if isinstance(payload, dict) else None
        if not isinstance(items, dict):
            logger.warning("Media lookup for %s returned an unexpected payload", platform)
            return {}
        return {
            str(name): _as_ref(ref)
            for name, ref in items.items()
            if isinstance(ref, dict) and ref.get("url")
        }


def get_media_client() -> MediaClient:
    return MediaClient(settings.media_api_base_url, timeout=settings.sheets_timeout_seconds)
