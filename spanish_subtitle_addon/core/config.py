from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_PROMPT_PATH = Path(__file__).resolve().parent.parent / "prompts" / "translate_srt.txt"


def _split_csv(raw: str) -> List[str]:
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


class AddonSettings(BaseModel):
    aws_region: str = "us-east-1"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    bucket_name: str = ""
    signed_url_expires_s: int = Field(3600, gt=0)

    translation_provider: str = "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5-mini"
    prompt_path: str = str(DEFAULT_PROMPT_PATH)
    chunk_size: int = Field(0, ge=0)

    languages: List[str] = Field(default_factory=lambda: ["en", "es"])
    source_language: str = "en"
    translated_label: str = "Español (Traducido)"

    search_extensions: List[str] = Field(default_factory=lambda: ["srt"])
    search_limit: int = Field(10, ge=1)
    opensubtitles_url: str = "https://rest.opensubtitles.org"
    opensubtitles_user_agent: str = "TemporaryUserAgent"
    http_timeout_s: float = 30.0

    mlflow_tracking_uri: str = ""
    mlflow_experiment_name: str = "spanish_subtitle_addon/inference/subtitles"
    env: str = "local"

    @classmethod
    def from_env(cls) -> "AddonSettings":
        return cls(
            aws_region=os.getenv("AWS_REGION", "us-east-1").strip(),
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID", "").strip() or None,
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY", "").strip() or None,
            bucket_name=os.getenv("AWS_BUCKET_NAME", "").strip(),
            signed_url_expires_s=int(os.getenv("SIGNED_URL_EXPIRES_S", "3600")),
            translation_provider=os.getenv("TRANSLATION_PROVIDER", "gemini").strip().lower(),
            gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip() or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash").strip(),
            openai_api_key=os.getenv("OPENAI_API_KEY", "").strip() or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-5-mini").strip(),
            prompt_path=os.getenv("PROMPT_TRANSLATE_SRT", str(DEFAULT_PROMPT_PATH)),
            chunk_size=int(os.getenv("TRANSLATION_CHUNK_SIZE", "0")),
            languages=_split_csv(os.getenv("SUBTITLE_LANGUAGES", "en,es")),
            source_language=os.getenv("SOURCE_LANGUAGE", "en").strip().lower(),
            translated_label=os.getenv("TRANSLATED_LABEL", "Español (Traducido)"),
            search_extensions=_split_csv(os.getenv("SEARCH_EXTENSIONS", "srt")),
            search_limit=int(os.getenv("SEARCH_LIMIT", "10")),
            opensubtitles_url=os.getenv("OPENSUBTITLES_URL", "https://rest.opensubtitles.org").strip(),
            opensubtitles_user_agent=os.getenv("OPENSUBTITLES_USER_AGENT", "TemporaryUserAgent").strip(),
            http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "30")),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", "").strip(),
            mlflow_experiment_name=os.getenv(
                "MLFLOW_EXPERIMENT_NAME", "spanish_subtitle_addon/inference/subtitles"
            ),
            env=os.getenv("ENV", "local"),
        )
