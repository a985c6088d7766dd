"""Adapter base for vendors that speak the OpenAI chat-completions dialect.

Both Mistral and OpenAI accept ``POST {base_url}/chat/completions`` with a
bearer token and return ``choices[0].message.content``, so both are driven
through the official ``openai`` async SDK pointed at the vendor's base URL.

The SDK's own retry loop is disabled (``max_retries=0``): retrying is the
fallback orchestrator's job, and it needs to see every upstream status code.
"""

from __future__ import annotations

from typing import Any

import httpx
import openai

from formai.providers.ai.base import CONNECT_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, BaseAIProvider
from formai.utils.errors import (
    InvalidUpstreamResponseError,
    ProviderError,
    UpstreamServerError,
    error_for_status,
)
from formai.utils.prompts import ANALYSIS_SYSTEM_PROMPT


class OpenAICompatibleProvider(BaseAIProvider):
    """Shared request/response handling for OpenAI-style chat APIs."""

    BASE_URL: str = "https://api.openai.com/v1"
    LABEL: str = "OpenAI"
    OCR_MODEL: str = ""
    OCR_MAX_TOKENS: int = 4000
    ANALYSIS_MODEL: str = ""
    ANALYSIS_MAX_TOKENS: int = 1000

    def __init__(
        self,
        api_key: str = "",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        super().__init__(api_key)
        self._client = openai.AsyncOpenAI(
            api_key=api_key or "",
            base_url=self.BASE_URL,
            timeout=openai.Timeout(timeout, connect=CONNECT_TIMEOUT),
            max_retries=0,
            http_client=http_client,
        )

    # ------------------------------------------------------------------
    # Vendor hooks
    # ------------------------------------------------------------------

    async def _request_analysis(self, prompt: str) -> str | None:
        return await self._chat(
            model=self.ANALYSIS_MODEL,
            messages=[
                {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.ANALYSIS_MAX_TOKENS,
        )

    async def _probe(self) -> bool:
        try:
            await self._client.models.list()
            return True
        except openai.APIError as exc:
            self._logger.info("provider_probe_rejected", error=str(exc))
            return False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        max_tokens: int,
    ) -> str | None:
        """Run one chat completion and return ``choices[0].message.content``."""
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.TEMPERATURE,
                max_tokens=max_tokens,
            )
        except openai.APIError as exc:
            raise self._translate_error(exc) from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise InvalidUpstreamResponseError(
                f"{self.LABEL} response contained no choices",
                provider_name=self.NAME,
            )

        usage = getattr(response, "usage", None)
        self._logger.debug(
            "chat_completion",
            model=model,
            tokens=getattr(usage, "total_tokens", None),
        )
        return _content_text(choices[0].message.content)

    def _translate_error(self, exc: openai.APIError) -> ProviderError:
        if isinstance(exc, openai.APIStatusError):
            return error_for_status(
                exc.status_code,
                f"{self.LABEL} API error: {exc.status_code} - {exc.message}",
                provider_name=self.NAME,
            )
        if isinstance(exc, openai.APITimeoutError):
            return UpstreamServerError(f"{self.LABEL} request timed out", provider_name=self.NAME)
        if isinstance(exc, openai.APIConnectionError):
            return UpstreamServerError(
                f"{self.LABEL} connection failed: {exc}",
                provider_name=self.NAME,
            )
        return InvalidUpstreamResponseError(
            f"{self.LABEL} returned an unexpected response: {exc}",
            provider_name=self.NAME,
        )


def _content_text(content: Any) -> str | None:
    """Flatten a message ``content`` that may be a string or a list of parts."""
    if content is None or isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            text = part.get("text") if isinstance(part, dict) else getattr(part, "text", None)
            if isinstance(text, str):
                parts.append(text)
        return "\n".join(parts)
    return str(content)
