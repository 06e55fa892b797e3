import asyncio
import unittest

import httpx

from spanish_subtitle_addon.adapters.opensubtitles.rest_client import OpenSubtitlesRestAdapter
from spanish_subtitle_addon.core.config import AddonSettings
from spanish_subtitle_addon.core.errors import ProviderUnavailable
from spanish_subtitle_addon.core.schemas.subtitles import SubtitleRequest, SubtitleSearchQuery
from spanish_subtitle_addon.models.llm.srt_translator import SrtTranslator
from spanish_subtitle_addon.pipelines.inference.subtitle_pipeline import SubtitleTranslationPipeline
from fakes import FakeFetcher, FakeLLM, FakeStore, null_logger


def entry(lang: str, name: str, link: str, fmt: str = "srt") -> dict:
    return {
        "ISO639": lang,
        "LanguageName": name,
        "SubFormat": fmt,
        "SubDownloadLink": link,
        "SubFileName": link.rsplit("/", 1)[-1],
        "SubEncoding": "UTF-8",
        "Score": "12.5",
    }


PAYLOAD = [
    entry("en", "English", "https://dl.opensubtitles.org/en/download/src-api/vrf-1/filead/1.gz"),
    entry("en", "English", "https://dl.opensubtitles.org/en/download/src-api/vrf-2/filead/2.gz", fmt="sub"),
    entry("es", "Spanish", "https://dl.opensubtitles.org/en/download/src-api/vrf-3/filead/3.gz"),
    entry("en", "English", "https://dl.opensubtitles.org/en/download/src-api/vrf-4/filead/4.gz"),
    entry("en", "English", "https://dl.opensubtitles.org/en/download/src-api/vrf-5/filead/5.gz"),
]


class OpenSubtitlesAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.requests = []

    def _adapter(self, status: int = 200, payload=None) -> OpenSubtitlesRestAdapter:
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return httpx.Response(status, json=PAYLOAD if payload is None else payload)

        return OpenSubtitlesRestAdapter(
            base_url="https://rest.opensubtitles.org/",
            user_agent="AddonTest v1",
            transport=httpx.MockTransport(handler),
            logger=null_logger(),
        )

    def test_builds_sorted_search_path(self) -> None:
        adapter = self._adapter()
        query = SubtitleSearchQuery(imdbid="tt0944947", season=1, episode=2, sublanguageid="eng")
        asyncio.run(adapter.search(query))

        request = self.requests[0]
        self.assertEqual(
            str(request.url),
            "https://rest.opensubtitles.org/search/episode-2/imdbid-944947/season-1/sublanguageid-eng",
        )
        self.assertEqual(request.headers["X-User-Agent"], "AddonTest v1")

    def test_groups_filters_and_limits(self) -> None:
        adapter = self._adapter()
        result = asyncio.run(adapter.search(SubtitleSearchQuery(imdbid="tt1", limit=2)))

        self.assertEqual(sorted(result), ["en", "es"])
        self.assertEqual(len(result["en"]), 2)
        first = result["en"][0]
        self.assertEqual(first.lang, "English")
        self.assertEqual(first.url, "https://dl.opensubtitles.org/en/download/src-api/vrf-1/filead/1")
        self.assertEqual(
            first.utf8,
            "https://dl.opensubtitles.org/en/download/subencoding-utf8/src-api/vrf-1/filead/1",
        )
        self.assertEqual(first.score, 12.5)
        self.assertTrue(result["en"][1].utf8.endswith("/4"))

    def test_non_list_payload_is_empty(self) -> None:
        adapter = self._adapter(payload={"error": "nothing"})
        self.assertEqual(asyncio.run(adapter.search(SubtitleSearchQuery(imdbid="tt1"))), {})

    def test_http_error_raises(self) -> None:
        adapter = self._adapter(status=503, payload=[])
        with self.assertRaises(httpx.HTTPStatusError):
            asyncio.run(adapter.search(SubtitleSearchQuery(imdbid="tt1")))

    def test_http_error_becomes_provider_unavailable_in_pipeline(self) -> None:
        settings = AddonSettings()
        pipeline = SubtitleTranslationPipeline(
            tool=self._adapter(status=503, payload=[]),
            fetcher=FakeFetcher(),
            translator=SrtTranslator(FakeLLM(), settings.prompt_path),
            store=FakeStore(),
            logger=null_logger(),
            settings=settings,
        )
        outcome = asyncio.run(pipeline.search_outcome(SubtitleRequest(imdbid="tt1")))
        self.assertIsInstance(outcome.error, ProviderUnavailable)
        self.assertEqual(asyncio.run(pipeline.run(SubtitleRequest(imdbid="tt1"))), [])

    def test_missing_base_url(self) -> None:
        adapter = OpenSubtitlesRestAdapter(base_url="", user_agent="ua")
        with self.assertRaises(ValueError):
            adapter.build_url({"imdbid": "tt1"})


if __name__ == "__main__":
    unittest.main()
