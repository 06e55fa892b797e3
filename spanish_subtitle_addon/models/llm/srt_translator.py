from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import srt

from spanish_subtitle_addon.core.contracts.providers import LLMClient
from spanish_subtitle_addon.core.errors import TranslationFailure
from spanish_subtitle_addon.utils.file_io import load_prompt

log = logging.getLogger(__name__)


class SrtTranslator:
    """Sends SRT text to an LLM wrapped in the instruction template.

    With ``chunk_size`` of 0 the whole file goes out in a single prompt. A positive
    value splits the file into groups of that many cues, keeping the original
    numbering, and joins the generated chunks back in order.
    """

    def __init__(
        self,
        llm: LLMClient,
        prompt_path: str,
        chunk_size: int = 0,
    ) -> None:
        self._llm = llm
        self._prompt_path = prompt_path
        self._chunk_size = chunk_size
        self._template: Optional[str] = None

    @property
    def template(self) -> str:
        if self._template is None:
            self._template = load_prompt(self._prompt_path)
        return self._template

    def translate(self, srt_text: str) -> str:
        if self._chunk_size <= 0:
            return self._translate_block(srt_text)

        subtitles = self._parse(srt_text)
        if not subtitles:
            return self._translate_block(srt_text)

        parts = [
            self._translate_block(srt.compose(chunk, reindex=False)).strip()
            for chunk in self._chunked(subtitles, self._chunk_size)
        ]
        return "\n\n".join(parts) + "\n"

    def _translate_block(self, text: str) -> str:
        prompt = self.template.format(srt_content=text)
        try:
            generated = self._llm.generate(prompt)
        except Exception as exc:
            raise TranslationFailure(f"Translation request failed: {exc}") from exc
        if not generated or not generated.strip():
            raise TranslationFailure("Translation provider returned empty text")
        return generated

    @staticmethod
    def _parse(srt_text: str) -> List[srt.Subtitle]:
        try:
            return list(srt.parse(srt_text))
        except srt.SRTParseError as exc:
            log.warning("Could not split SRT into cues, sending it whole: %s", exc)
            return []

    @staticmethod
    def _chunked(items: List[srt.Subtitle], size: int) -> Iterable[List[srt.Subtitle]]:
        for i in range(0, len(items), size):
            yield items[i : i + size]
