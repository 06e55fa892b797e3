from __future__ import annotations

from typing import Optional

from openai import OpenAI

from spanish_subtitle_addon.core.contracts.providers import LLMClient

SYSTEM_PROMPT = """
You are a professional film subtitle translator.
Output only the translated SRT file: no explanations, no translator notes,
no markdown code fences. Keep every cue, its number and its timestamps.
"""


class OpenAIChatClient(LLMClient):
    def __init__(self, api_key: str, model: str, timeout_s: float = 30.0) -> None:
        self._client = OpenAI(api_key=api_key, timeout=timeout_s)
        self._model = model

    @classmethod
    def from_key(
        cls, api_key: Optional[str], model: str, timeout_s: float = 30.0
    ) -> Optional["OpenAIChatClient"]:
        if not api_key:
            return None
        return cls(api_key=api_key, model=model, timeout_s=timeout_s)

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT.strip()},
                {"role": "user", "content": prompt},
            ],
        )
        return response.choices[0].message.content or ""
