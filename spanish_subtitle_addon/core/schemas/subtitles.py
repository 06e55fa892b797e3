from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Request keys consumed by the pipeline itself and never sent to the provider.
_PIPELINE_KEYS = {"video_id"}


def _imdbid_as_text(value: Any) -> Any:
    # bool is an int subclass and stays invalid.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class SubtitleRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    imdbid: str = Field(..., min_length=1)
    video_id: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None

    @field_validator("imdbid", mode="before")
    @classmethod
    def coerce_imdbid(cls, value: Any) -> Any:
        return _imdbid_as_text(value)

    @property
    def media_id(self) -> str:
        return self.video_id or self.imdbid

    def filters(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        return {key: value for key, value in data.items() if key not in _PIPELINE_KEYS}


class SubtitleSearchQuery(BaseModel):
    model_config = ConfigDict(extra="allow")

    imdbid: str = Field(..., min_length=1)
    season: Optional[int] = None
    episode: Optional[int] = None
    extensions: List[str] = Field(default_factory=lambda: ["srt"])
    limit: int = Field(10, ge=1)

    @field_validator("imdbid", mode="before")
    @classmethod
    def coerce_imdbid(cls, value: Any) -> Any:
        return _imdbid_as_text(value)

    def provider_filters(self) -> Dict[str, Any]:
        """Filters forwarded to the provider; extensions and limit apply client side."""
        data = self.model_dump(exclude_none=True)
        data.pop("extensions", None)
        data.pop("limit", None)
        return data


class RawSubtitleFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    utf8: Optional[str] = None
    url: Optional[str] = None
    lang: str = ""
    langcode: str = ""
    filename: Optional[str] = None
    encoding: Optional[str] = None
    score: Optional[float] = None


RawSubtitleResult = Dict[str, List[RawSubtitleFile]]


class SubtitleDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    lang: str


class TranslationJob(BaseModel):
    index: int = Field(..., ge=0)
    source_url: str
    storage_key: str
