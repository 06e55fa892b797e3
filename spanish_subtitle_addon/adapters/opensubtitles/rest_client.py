from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from spanish_subtitle_addon.core.config import AddonSettings
from spanish_subtitle_addon.core.contracts.providers import SubtitleSearchTool
from spanish_subtitle_addon.core.schemas.subtitles import (
    RawSubtitleFile,
    RawSubtitleResult,
    SubtitleSearchQuery,
)
from spanish_subtitle_addon.monitoring.mlflow_utils import MLflowLogger

log = logging.getLogger(__name__)


class OpenSubtitlesRestAdapter(SubtitleSearchTool):
    """Searches the OpenSubtitles REST endpoint and groups results by language."""

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout_s: float = 30.0,
        logger: Optional[MLflowLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout_s = timeout_s
        self._logger = logger
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: AddonSettings, logger: Optional[MLflowLogger] = None
    ) -> "OpenSubtitlesRestAdapter":
        return cls(
            base_url=settings.opensubtitles_url,
            user_agent=settings.opensubtitles_user_agent,
            timeout_s=settings.http_timeout_s,
            logger=logger,
        )

    def build_url(self, filters: Dict[str, Any]) -> str:
        if not self._base_url:
            raise ValueError("OPENSUBTITLES_URL is not set")
        segments = []
        for key, value in sorted(_sanitize_filters(filters).items()):
            segments.append(f"{key}-{quote(value, safe='')}")
        return f"{self._base_url}/search/{'/'.join(segments)}"

    async def search(self, query: SubtitleSearchQuery) -> RawSubtitleResult:
        url = self.build_url(query.provider_filters())
        headers = {"X-User-Agent": self._user_agent, "Accept": "application/json"}
        start = time.perf_counter()
        success = False
        response_bytes = 0
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url, headers=headers)
                response_bytes = len(response.content or b"")
                response.raise_for_status()
                data = response.json()
            success = True
        finally:
            latency_ms = (time.perf_counter() - start) * 1000
            if self._logger:
                self._logger.log_tool_call(
                    tool_name="opensubtitles_search",
                    latency_ms=latency_ms,
                    success=success,
                    response_bytes=response_bytes,
                )

        if not isinstance(data, list):
            log.warning("Unexpected OpenSubtitles payload type: %s", type(data).__name__)
            return {}
        return group_by_language(data, query.extensions, query.limit)


def group_by_language(
    entries: List[Dict[str, Any]], extensions: List[str], limit: int
) -> RawSubtitleResult:
    allowed = {ext.lower().lstrip(".") for ext in extensions}
    grouped: RawSubtitleResult = {}
    for entry in entries:
        sub_format = str(entry.get("SubFormat") or "").lower()
        if allowed and sub_format not in allowed:
            continue
        langcode = str(entry.get("ISO639") or "").lower()
        link = entry.get("SubDownloadLink")
        if not langcode or not link:
            continue
        bucket = grouped.setdefault(langcode, [])
        if len(bucket) >= limit:
            continue
        bucket.append(
            RawSubtitleFile(
                url=_plain_link(link),
                utf8=_utf8_link(link),
                lang=str(entry.get("LanguageName") or langcode),
                langcode=langcode,
                filename=entry.get("SubFileName"),
                encoding=entry.get("SubEncoding"),
                score=_as_float(entry.get("Score")),
            )
        )
    return grouped


def _sanitize_filters(filters: Dict[str, Any]) -> Dict[str, str]:
    cleaned: Dict[str, str] = {}
    for key, value in filters.items():
        if value is None or isinstance(value, (list, dict)):
            continue
        key = str(key).lower()
        value = str(value).strip().lower()
        if key == "imdbid":
            value = value.lstrip("t").lstrip("0")
        if value:
            cleaned[key] = value
    return cleaned


def _plain_link(link: str) -> str:
    return link[:-3] if link.endswith(".gz") else link


def _utf8_link(link: str) -> str:
    return _plain_link(link).replace("download/", "download/subencoding-utf8/", 1)


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
