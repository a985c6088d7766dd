"""OpenAI fallback provider adapter (last resort).

``gpt-4o`` reads images, ``gpt-3.5-turbo`` handles analysis.  Always tried
last, after both primaries have failed.
"""

from __future__ import annotations

from formai.providers.ai.openai_compatible import OpenAICompatibleProvider
from formai.utils.data_uri import DataURI
from formai.utils.prompts import OCR_PROMPT, OCR_SYSTEM_PROMPT


class OpenAIFallbackProvider(OpenAICompatibleProvider):
    """OpenAI-backed provider used when the primaries are down."""

    NAME = "openai-fallback"
    LABEL = "OpenAI"
    BASE_URL = "https://api.openai.com/v1"
    OCR_CONFIDENCE = 0.88
    TEXT_BUDGET = 3000
    OCR_MODEL = "gpt-4o"
    OCR_MAX_TOKENS = 2000
    ANALYSIS_MODEL = "gpt-3.5-turbo"
    ANALYSIS_MAX_TOKENS = 1000

    async def _request_ocr(self, image: DataURI) -> str | None:
        return await self._chat(
            model=self.OCR_MODEL,
            messages=[
                {"role": "system", "content": OCR_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": OCR_PROMPT},
                        {"type": "image_url", "image_url": {"url": image.uri}},
                    ],
                },
            ],
            max_tokens=self.OCR_MAX_TOKENS,
        )
