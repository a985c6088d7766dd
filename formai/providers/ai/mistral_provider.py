"""Mistral OCR provider adapter (OCR primary).

Reads document images through Mistral's OCR model and falls back to
``mistral-small-latest`` for structured analysis.  Mistral exposes an
OpenAI-compatible chat endpoint, so requests go through the ``openai`` SDK
with Mistral's base URL.
"""

from __future__ import annotations

from formai.providers.ai.openai_compatible import OpenAICompatibleProvider
from formai.utils.data_uri import DataURI
from formai.utils.prompts import OCR_PROMPT


class MistralOCRProvider(OpenAICompatibleProvider):
    """Mistral-backed provider; the designated OCR primary."""

    NAME = "mistral-ocr"
    LABEL = "Mistral"
    BASE_URL = "https://api.mistral.ai/v1"
    OCR_CONFIDENCE = 0.95
    TEXT_BUDGET = 3000
    OCR_MODEL = "mistral-ocr-latest"
    OCR_MAX_TOKENS = 4000
    ANALYSIS_MODEL = "mistral-small-latest"
    ANALYSIS_MAX_TOKENS = 1000

    async def _request_ocr(self, image: DataURI) -> str | None:
        return await self._chat(
            model=self.OCR_MODEL,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": OCR_PROMPT},
                        {"type": "image_url", "image_url": {"url": image.uri}},
                    ],
                }
            ],
            max_tokens=self.OCR_MAX_TOKENS,
        )
