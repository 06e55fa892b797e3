import unittest

from spanish_subtitle_addon.core.schemas.subtitles import RawSubtitleFile, SubtitleDescriptor
from spanish_subtitle_addon.pipelines.inference.subtitle_pipeline import (
    format_subtitles,
    select_source_urls,
)
from fakes import raw_file


class FormatSubtitlesTests(unittest.TestCase):
    def test_only_allowed_languages_in_allow_list_order(self) -> None:
        raw = {
            "fr": [raw_file("http://x/fr.srt", "French")],
            "es": [raw_file("http://x/es1.srt", "Spanish"), raw_file("http://x/es2.srt", "Spanish")],
            "en": [raw_file("http://x/en1.srt", "English")],
        }
        formatted = format_subtitles(raw, ["en", "es"])
        self.assertEqual([item.id for item in formatted], ["en-1", "es-1", "es-2"])
        self.assertEqual(formatted[2].url, "http://x/es2.srt")
        self.assertNotIn("French", {item.lang for item in formatted})

    def test_none_and_missing_languages_contribute_nothing(self) -> None:
        self.assertEqual(format_subtitles(None, ["en", "es"]), [])
        self.assertEqual(format_subtitles({}, ["en", "es"]), [])
        formatted = format_subtitles({"es": [raw_file("http://x/es.srt", "Spanish")]}, ["en", "es"])
        self.assertEqual([item.id for item in formatted], ["es-1"])

    def test_utf8_link_is_preferred_and_urlless_entries_skipped(self) -> None:
        raw = {
            "en": [
                RawSubtitleFile(url="http://x/plain.srt", utf8="http://x/utf8.srt", lang="English"),
                RawSubtitleFile(url=None, utf8=None, lang="English"),
                RawSubtitleFile(url="http://x/only-plain.srt", lang="English"),
            ]
        }
        formatted = format_subtitles(raw, ["en"])
        self.assertEqual(
            formatted,
            [
                SubtitleDescriptor(id="en-1", url="http://x/utf8.srt", lang="English"),
                SubtitleDescriptor(id="en-3", url="http://x/only-plain.srt", lang="English"),
            ],
        )

    def test_plain_dict_entries(self) -> None:
        raw = {
            "en": [{"utf8": "http://x/1.srt", "lang": "en"}],
            "es": [{"url": "http://x/2.srt", "lang": "es", "score": 7.5}, "not-an-entry"],
        }
        self.assertEqual(
            format_subtitles(raw, ["en", "es"]),
            [
                SubtitleDescriptor(id="en-1", url="http://x/1.srt", lang="en"),
                SubtitleDescriptor(id="es-1", url="http://x/2.srt", lang="es"),
            ],
        )

    def test_configurable_allow_list(self) -> None:
        raw = {"en": [raw_file("http://x/en.srt", "English")], "pt": [raw_file("http://x/pt.srt", "Portuguese")]}
        self.assertEqual([item.id for item in format_subtitles(raw, ["pt"])], ["pt-1"])


class SelectSourceTests(unittest.TestCase):
    def test_selects_only_source_language_ids(self) -> None:
        descriptors = [
            SubtitleDescriptor(id="en-1", url="http://x/en1.srt", lang="English"),
            SubtitleDescriptor(id="es-1", url="http://x/es1.srt", lang="Spanish"),
            SubtitleDescriptor(id="en-2", url="http://x/en2.srt", lang="English"),
            SubtitleDescriptor(id="translated-1", url="http://x/t.srt", lang="Español (Traducido)"),
        ]
        self.assertEqual(select_source_urls(descriptors, "en"), ["http://x/en1.srt", "http://x/en2.srt"])
        self.assertEqual(select_source_urls(descriptors, "es"), ["http://x/es1.srt"])
        self.assertEqual(select_source_urls([], "en"), [])


if __name__ == "__main__":
    unittest.main()
