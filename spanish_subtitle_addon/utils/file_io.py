from __future__ import annotations

import re
from pathlib import Path


def load_prompt(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def normalize_media_id(media_id: str) -> str:
    """Turn a Stremio id such as ``tt0944947:1:2`` into a storage-safe prefix."""
    cleaned = media_id.strip().replace(":", "_")
    cleaned = re.sub(r"[^A-Za-z0-9_-]+", "_", cleaned)
    return cleaned.strip("_") or "subtitle"


def translated_key(media_id: str, source_lang: str, index: int) -> str:
    return f"{normalize_media_id(media_id)}_translated_{source_lang}_{index + 1}.srt"
