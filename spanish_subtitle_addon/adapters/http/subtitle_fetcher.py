from __future__ import annotations

import logging
from typing import Optional

import httpx

from spanish_subtitle_addon.core.contracts.providers import SubtitleFetcher
from spanish_subtitle_addon.core.errors import FetchFailure
from spanish_subtitle_addon.utils.encoding import decode_bytes

log = logging.getLogger(__name__)


class HttpSubtitleFetcher(SubtitleFetcher):
    def __init__(
        self,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._transport = transport

    async def fetch_text(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchFailure(f"Could not download {url}: {exc}") from exc

        text = decode_bytes(response.content, declared=response.charset_encoding)
        if not text.strip():
            raise FetchFailure(f"Empty subtitle body at {url}")
        log.debug("Fetched %d characters from %s", len(text), url)
        return text
