from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from spanish_subtitle_addon.adapters.apis.gemini_client import GeminiClient
from spanish_subtitle_addon.adapters.apis.openai_translator import OpenAIChatClient
from spanish_subtitle_addon.adapters.http.subtitle_fetcher import HttpSubtitleFetcher
from spanish_subtitle_addon.adapters.opensubtitles.rest_client import OpenSubtitlesRestAdapter
from spanish_subtitle_addon.adapters.storage.s3_storage import S3SubtitleStore
from spanish_subtitle_addon.core.config import AddonSettings
from spanish_subtitle_addon.core.contracts.providers import LLMClient
from spanish_subtitle_addon.core.errors import ConfigurationError
from spanish_subtitle_addon.core.schemas.subtitles import SubtitleDescriptor, SubtitleRequest
from spanish_subtitle_addon.models.llm.srt_translator import SrtTranslator
from spanish_subtitle_addon.monitoring.mlflow_utils import MLflowLogger
from spanish_subtitle_addon.pipelines.inference.subtitle_pipeline import SubtitleTranslationPipeline

log = logging.getLogger(__name__)


class SubtitleService:
    def __init__(self, pipeline: SubtitleTranslationPipeline) -> None:
        self._pipeline = pipeline

    async def generate_subtitles(self, data: Dict[str, Any]) -> List[SubtitleDescriptor]:
        """Entry point for the addon: never raises, always returns a list."""
        try:
            request = SubtitleRequest.model_validate(data)
        except ValueError as exc:
            log.error("Rejected subtitle request %r: %s", data, exc)
            return []
        return await self._pipeline.run(request)


def build_llm_client(settings: AddonSettings) -> Optional[LLMClient]:
    if settings.translation_provider == "gemini":
        return GeminiClient.from_key(settings.gemini_api_key, settings.gemini_model)
    if settings.translation_provider == "openai":
        return OpenAIChatClient.from_key(
            settings.openai_api_key, settings.openai_model, timeout_s=settings.http_timeout_s
        )
    raise ConfigurationError(f"Unknown TRANSLATION_PROVIDER: {settings.translation_provider}")


def build_service_from_env(settings: Optional[AddonSettings] = None) -> SubtitleService:
    settings = settings or AddonSettings.from_env()
    logger = MLflowLogger.from_settings(settings)
    tool = OpenSubtitlesRestAdapter.from_settings(settings, logger=logger)
    fetcher = HttpSubtitleFetcher(timeout_s=settings.http_timeout_s)

    llm_client = build_llm_client(settings)
    translator = SrtTranslator(llm_client, settings.prompt_path, settings.chunk_size) if llm_client else None
    if translator is None:
        log.warning("No %s API key configured, translations are disabled", settings.translation_provider)

    store = S3SubtitleStore.from_settings(settings) if settings.bucket_name else None
    if store is None:
        log.warning("AWS_BUCKET_NAME is not set, translations are disabled")

    pipeline = SubtitleTranslationPipeline(tool, fetcher, translator, store, logger, settings)
    return SubtitleService(pipeline)
