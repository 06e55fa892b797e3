from __future__ import annotations

from typing import Optional

from google import genai
from google.genai import types

from spanish_subtitle_addon.core.contracts.providers import LLMClient


class GeminiClient(LLMClient):
    def __init__(self, api_key: str, model: str, temperature: float = 0.0) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature

    @classmethod
    def from_key(cls, api_key: Optional[str], model: str) -> Optional["GeminiClient"]:
        if not api_key:
            return None
        return cls(api_key=api_key, model=model)

    def generate(self, prompt: str) -> str:
        response = self._client.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=self._temperature),
        )
        return response.text or ""
