from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from spanish_subtitle_addon.core.config import AddonSettings
from spanish_subtitle_addon.core.contracts.providers import (
    SubtitleFetcher,
    SubtitleSearchTool,
    SubtitleStore,
)
from spanish_subtitle_addon.core.errors import (
    PipelineError,
    ProviderEmpty,
    ProviderUnavailable,
    StorageFailure,
    TranslationFailure,
)
from spanish_subtitle_addon.core.schemas.outcomes import Outcome
from spanish_subtitle_addon.core.schemas.subtitles import (
    RawSubtitleFile,
    RawSubtitleResult,
    SubtitleDescriptor,
    SubtitleRequest,
    SubtitleSearchQuery,
    TranslationJob,
)
from spanish_subtitle_addon.models.llm.srt_translator import SrtTranslator
from spanish_subtitle_addon.monitoring.mlflow_utils import MLflowLogger
from spanish_subtitle_addon.utils.file_io import normalize_media_id, translated_key

log = logging.getLogger(__name__)


def format_subtitles(
    raw: Optional[RawSubtitleResult], languages: Sequence[str]
) -> List[SubtitleDescriptor]:
    """Flatten a per-language search result into descriptors for the allowed languages."""
    if not raw:
        log.info("No subtitles to format")
        return []

    formatted: List[SubtitleDescriptor] = []
    for lang_code in languages:
        files = raw.get(lang_code)
        if not isinstance(files, list):
            continue
        for index, entry in enumerate(files):
            try:
                data = RawSubtitleFile.model_validate(entry)
            except ValidationError:
                log.warning("Skipping malformed %s subtitle entry %d", lang_code, index + 1)
                continue
            url = data.utf8 or data.url
            if not url:
                continue
            formatted.append(
                SubtitleDescriptor(id=f"{lang_code}-{index + 1}", url=url, lang=data.lang)
            )
    return formatted


def select_source_urls(descriptors: Sequence[SubtitleDescriptor], source_language: str) -> List[str]:
    prefix = f"{source_language}-"
    return [item.url for item in descriptors if item.id.startswith(prefix)]


class SubtitleTranslationPipeline:
    def __init__(
        self,
        tool: SubtitleSearchTool,
        fetcher: SubtitleFetcher,
        translator: Optional[SrtTranslator],
        store: Optional[SubtitleStore],
        logger: MLflowLogger,
        settings: AddonSettings,
    ) -> None:
        self._tool = tool
        self._fetcher = fetcher
        self._translator = translator
        self._store = store
        self._logger = logger
        self._settings = settings

    def build_query(self, request: SubtitleRequest) -> SubtitleSearchQuery:
        merged: Dict[str, Any] = {
            "extensions": list(self._settings.search_extensions),
            "limit": self._settings.search_limit,
            **request.filters(),
        }
        return SubtitleSearchQuery.model_validate(merged)

    async def search_outcome(self, request: SubtitleRequest) -> Outcome[RawSubtitleResult]:
        start = time.perf_counter()
        try:
            query = self.build_query(request)
            result = await self._tool.search(query)
        except ValidationError as exc:
            return Outcome.failure(ProviderUnavailable(f"Invalid search query: {exc}"))
        except Exception as exc:
            return Outcome.failure(ProviderUnavailable(str(exc) or type(exc).__name__))
        finally:
            self._logger.log_metric("search_latency_ms", (time.perf_counter() - start) * 1000)

        if not result:
            return Outcome.failure(ProviderEmpty("No subtitles found"))
        self._logger.log_metric("search_count", sum(len(files) for files in result.values()))
        return Outcome.success(result)

    async def search(self, request: SubtitleRequest) -> Optional[RawSubtitleResult]:
        outcome = await self.search_outcome(request)
        if outcome.ok:
            return outcome.value
        if isinstance(outcome.error, ProviderEmpty):
            log.info("No subtitles found for %s", request.media_id)
        else:
            log.error("Error on subtitle search for %s: %s", request.media_id, outcome.error)
        return None

    def format(self, raw: Optional[RawSubtitleResult]) -> List[SubtitleDescriptor]:
        formatted = format_subtitles(raw, self._settings.languages)
        self._logger.log_metric("format_count", len(formatted))
        return formatted

    def plan_jobs(self, descriptors: Sequence[SubtitleDescriptor], media_id: str) -> List[TranslationJob]:
        source = self._settings.source_language
        return [
            TranslationJob(index=index, source_url=url, storage_key=translated_key(media_id, source, index))
            for index, url in enumerate(select_source_urls(descriptors, source))
        ]

    async def _run_job(self, job: TranslationJob) -> str:
        if self._translator is None:
            raise TranslationFailure("No translator configured")
        if self._store is None:
            raise StorageFailure("No storage configured")

        original = await self._fetcher.fetch_text(job.source_url)
        translated = await asyncio.to_thread(self._translator.translate, original)
        url = await asyncio.to_thread(self._store.upload, job.storage_key, translated)
        if not url:
            raise StorageFailure(f"Upload of {job.storage_key} returned no URL")
        return url

    async def translate_outcomes(
        self, descriptors: Sequence[SubtitleDescriptor], media_id: str
    ) -> List[Outcome[str]]:
        jobs = self.plan_jobs(descriptors, media_id)
        if not jobs:
            return []

        results = await asyncio.gather(
            *(self._run_job(job) for job in jobs), return_exceptions=True
        )
        outcomes: List[Outcome[str]] = []
        for job, result in zip(jobs, results):
            if isinstance(result, BaseException):
                error = result if isinstance(result, PipelineError) else TranslationFailure(str(result))
                log.warning(
                    "Translation job %s failed (%s): %s", job.storage_key, type(error).__name__, error
                )
                outcomes.append(Outcome.failure(error))
            else:
                outcomes.append(Outcome.success(result))
        return outcomes

    async def translate(
        self, descriptors: Sequence[SubtitleDescriptor], media_id: str
    ) -> List[SubtitleDescriptor]:
        try:
            outcomes = await self.translate_outcomes(descriptors, media_id)
        except Exception:
            log.exception("Error on fetch and translate %s subtitles", self._settings.source_language)
            return []

        urls = [outcome.value for outcome in outcomes if outcome.ok and outcome.value]
        self._logger.log_metric("translated_count", len(urls))
        self._logger.log_metric("translation_failures", len(outcomes) - len(urls))
        return [
            SubtitleDescriptor(id=f"translated-{index + 1}", url=url, lang=self._settings.translated_label)
            for index, url in enumerate(urls)
        ]

    async def run(self, request: SubtitleRequest) -> List[SubtitleDescriptor]:
        run_name = f"subtitles-{normalize_media_id(request.media_id)}"
        with self._logger.start_run(run_name=run_name):
            self._logger.log_params(
                {
                    "imdbid": request.imdbid,
                    "media_id": request.media_id,
                    "languages": ",".join(self._settings.languages),
                    "source_language": self._settings.source_language,
                }
            )

            raw = await self.search(request)
            formatted = self.format(raw)
            translated = await self.translate(formatted, request.media_id)

            subtitles = [*formatted, *translated]
            self._logger.log_metric("total_count", len(subtitles))
            log.info("Found %d subtitles", len(subtitles))
            return subtitles
