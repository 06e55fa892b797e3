from __future__ import annotations

import re
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, unquote

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spanish_subtitle_addon.monitoring.log_setup import setup_logging
from spanish_subtitle_addon.services.subtitle_service import SubtitleService, build_service_from_env

MANIFEST: Dict[str, Any] = {
    "id": "org.stremio.spanishsubtitles",
    "version": "1.0.0",
    "name": "Spanish Subtitles",
    "description": "OpenSubtitles results plus English subtitles machine-translated to Spanish.",
    "resources": ["subtitles"],
    "types": ["movie", "series"],
    "idPrefixes": ["tt"],
    "catalogs": [],
}

_VIDEO_ID = re.compile(r"^(tt\d+)(?::(\d+):(\d+))?$")


def parse_video_id(video_id: str) -> Optional[Dict[str, Any]]:
    """Split ``tt0944947:1:2`` into the search filters for that episode."""
    match = _VIDEO_ID.match(video_id.strip())
    if not match:
        return None
    imdbid, season, episode = match.groups()
    data: Dict[str, Any] = {"imdbid": imdbid, "video_id": video_id.strip()}
    if season is not None:
        data["season"] = int(season)
        data["episode"] = int(episode)
    return data


def parse_extra(extra: str) -> Dict[str, Any]:
    values = parse_qs(unquote(extra))
    video_hash = (values.get("videoHash") or [""])[0].strip()
    return {"moviehash": video_hash} if video_hash else {}


def create_app(service: Optional[SubtitleService] = None) -> FastAPI:
    app = FastAPI(title="Spanish Subtitles Addon")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.state.service = service

    def get_service() -> SubtitleService:
        if app.state.service is None:
            app.state.service = build_service_from_env()
        return app.state.service

    async def subtitles_for(video_id: str, extra: str = "") -> Dict[str, Any]:
        data = parse_video_id(video_id)
        if data is None:
            return {"subtitles": []}
        data.update(parse_extra(extra))
        subtitles = await get_service().generate_subtitles(data)
        return {"subtitles": [item.model_dump() for item in subtitles]}

    @app.get("/manifest.json")
    async def manifest() -> Dict[str, Any]:
        return MANIFEST

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/subtitles/{media_type}/{video_id}.json")
    async def subtitles(media_type: str, video_id: str) -> Dict[str, Any]:
        return await subtitles_for(video_id)

    @app.get("/subtitles/{media_type}/{video_id}/{extra}.json")
    async def subtitles_with_extra(media_type: str, video_id: str, extra: str) -> Dict[str, Any]:
        return await subtitles_for(video_id, extra)

    return app


def main() -> FastAPI:
    load_dotenv()
    setup_logging()
    return create_app()
