"""Interfaces of the three external services the pipeline talks to."""
from __future__ import annotations

from typing import Optional, Protocol

from spanish_subtitle_addon.core.schemas.subtitles import RawSubtitleResult, SubtitleSearchQuery


class SubtitleSearchTool(Protocol):
    async def search(self, query: SubtitleSearchQuery) -> RawSubtitleResult:
        ...


class SubtitleFetcher(Protocol):
    async def fetch_text(self, url: str) -> str:
        ...


class LLMClient(Protocol):
    def generate(self, prompt: str) -> str:
        ...


class SubtitleStore(Protocol):
    def upload(self, key: str, content: str) -> Optional[str]:
        """Store ``content`` under ``key`` and return a signed URL, or None on failure."""
        ...
