"""Anthropic Claude provider adapter (analysis primary).

Key differences from the OpenAI-style adapters:
    - The system prompt is a top-level ``system`` parameter, not a message
    - Vision uses an "image" content block with a base64 source, placed
      before the text prompt
    - Response content is a list of blocks; only "text" blocks are kept
"""

from __future__ import annotations

from typing import Any

import anthropic
import httpx

from formai.providers.ai.base import CONNECT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, BaseAIProvider
from formai.utils.data_uri import DataURI
from formai.utils.errors import (
    InvalidUpstreamResponseError,
    ProviderError,
    UpstreamServerError,
    error_for_status,
)
from formai.utils.prompts import ANALYSIS_SYSTEM_PROMPT, OCR_PROMPT, OCR_SYSTEM_PROMPT


class ClaudeAnalysisProvider(BaseAIProvider):
    """Claude-backed provider; the designated analysis primary."""

    NAME = "claude-analysis"
    MODEL = "claude-3-5-sonnet-20241022"
    OCR_CONFIDENCE = 0.92
    TEXT_BUDGET = 4000
    OCR_MAX_TOKENS = 4000
    ANALYSIS_MAX_TOKENS = 2000

    def __init__(
        self,
        api_key: str = "",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        super().__init__(api_key)
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or "",
            timeout=anthropic.Timeout(timeout, connect=CONNECT_TIMEOUT),
            max_retries=0,
            http_client=http_client,
        )

    async def _request_ocr(self, image: DataURI) -> str | None:
        return await self._messages(
            system=OCR_SYSTEM_PROMPT,
            content=[
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image.mime_type,
                        "data": image.payload,
                    },
                },
                {"type": "text", "text": OCR_PROMPT},
            ],
            max_tokens=self.OCR_MAX_TOKENS,
        )

    async def _request_analysis(self, prompt: str) -> str | None:
        return await self._messages(
            system=ANALYSIS_SYSTEM_PROMPT,
            content=prompt,
            max_tokens=self.ANALYSIS_MAX_TOKENS,
        )

    async def _probe(self) -> bool:
        try:
            await self._client.messages.create(
                model=self.MODEL,
                max_tokens=10,
                messages=[{"role": "user", "content": "Hello"}],
            )
            return True
        except anthropic.APIError as exc:
            self._logger.info("provider_probe_rejected", error=str(exc))
            return False

    async def _messages(self, system: str, content: Any, max_tokens: int) -> str | None:
        try:
            response = await self._client.messages.create(
                model=self.MODEL,
                max_tokens=max_tokens,
                temperature=self.TEMPERATURE,
                system=system,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as exc:
            raise self._translate_error(exc) from exc

        text_blocks = [
            block.text for block in (response.content or []) if getattr(block, "type", None) == "text"
        ]
        usage = getattr(response, "usage", None)
        self._logger.debug(
            "messages_complete",
            model=self.MODEL,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
        if not text_blocks:
            return None
        return "\n".join(text_blocks)

    def _translate_error(self, exc: anthropic.APIError) -> ProviderError:
        if isinstance(exc, anthropic.APIStatusError):
            return error_for_status(
                exc.status_code,
                f"Claude API error: {exc.status_code} - {exc.message}",
                provider_name=self.NAME,
            )
        if isinstance(exc, anthropic.APITimeoutError):
            return UpstreamServerError("Claude request timed out", provider_name=self.NAME)
        if isinstance(exc, anthropic.APIConnectionError):
            return UpstreamServerError(f"Claude connection failed: {exc}", provider_name=self.NAME)
        return InvalidUpstreamResponseError(
            f"Claude returned an unexpected response: {exc}",
            provider_name=self.NAME,
        )
