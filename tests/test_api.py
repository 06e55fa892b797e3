import unittest
from typing import Any, Dict, List

from fastapi.testclient import TestClient

from spanish_subtitle_addon.api.app import create_app, parse_extra, parse_video_id
from spanish_subtitle_addon.core.schemas.subtitles import SubtitleDescriptor


class RecordingService:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []

    async def generate_subtitles(self, data: Dict[str, Any]) -> List[SubtitleDescriptor]:
        self.calls.append(data)
        return [
            SubtitleDescriptor(id="en-1", url="http://x/1.srt", lang="English"),
            SubtitleDescriptor(id="translated-1", url="https://s3/t.srt", lang="Español (Traducido)"),
        ]


class AddonApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.service = RecordingService()
        self.client = TestClient(create_app(service=self.service))

    def test_manifest(self) -> None:
        body = self.client.get("/manifest.json").json()
        self.assertEqual(body["resources"], ["subtitles"])
        self.assertEqual(body["idPrefixes"], ["tt"])

    def test_movie_subtitles(self) -> None:
        response = self.client.get("/subtitles/movie/tt0111161.json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["subtitles"][1],
            {"id": "translated-1", "url": "https://s3/t.srt", "lang": "Español (Traducido)"},
        )
        self.assertEqual(self.service.calls, [{"imdbid": "tt0111161", "video_id": "tt0111161"}])

    def test_series_subtitles_with_extra(self) -> None:
        response = self.client.get("/subtitles/series/tt0944947:1:2/videoHash=abc123&videoSize=99.json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            self.service.calls[0],
            {"imdbid": "tt0944947", "video_id": "tt0944947:1:2", "season": 1, "episode": 2, "moviehash": "abc123"},
        )

    def test_unknown_id_prefix_returns_empty(self) -> None:
        response = self.client.get("/subtitles/series/kitsu:1.json")
        self.assertEqual(response.json(), {"subtitles": []})
        self.assertEqual(self.service.calls, [])

    def test_health(self) -> None:
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})


class ParsingTests(unittest.TestCase):
    def test_parse_video_id(self) -> None:
        self.assertEqual(parse_video_id("tt1"), {"imdbid": "tt1", "video_id": "tt1"})
        self.assertIsNone(parse_video_id("tt1:2"))
        self.assertIsNone(parse_video_id("kitsu:1"))

    def test_parse_extra(self) -> None:
        self.assertEqual(parse_extra("filename=a.mkv"), {})
        self.assertEqual(parse_extra("videoHash%3Dff00"), {"moviehash": "ff00"})


if __name__ == "__main__":
    unittest.main()
