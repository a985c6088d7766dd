"""Shared skeleton for the upstream AI provider adapters.

Every adapter performs the same steps around a vendor-specific request:

    extract_text:     validate data URI -> check key -> vendor call
                      -> fence strip / sentinel check -> OCRResult
    analyze_document: validate text -> check key -> truncate to budget
                      -> vendor call -> JSON extraction -> AnalysisResult

Subclasses only implement the three vendor hooks (``_request_ocr``,
``_request_analysis``, ``_probe``) and translate vendor SDK exceptions into
:mod:`formai.utils.errors` inside them.  Model name, temperature, token
budget and text budget are class constants, not caller-configurable.
"""

from __future__ import annotations

import time
from abc import abstractmethod

from pydantic import SecretStr

from formai.interfaces.ai_provider import IAnalysisCapable, IOCRCapable
from formai.models.provider import Capability, ProviderDescriptor
from formai.models.results import AnalysisResult, OCRResult
from formai.utils.data_uri import DataURI, parse_data_uri
from formai.utils.errors import InvalidCredentialError, InvalidInputError, InvalidUpstreamResponseError
from formai.utils.json_extraction import extract_json_object
from formai.utils.logging import get_logger
from formai.utils.prompts import build_analysis_prompt
from formai.utils.response_normalizer import normalize_analysis, normalize_ocr
from formai.utils.text import truncate_text

# Keeps a single call inside the caller's overall timeout budget.
DEFAULT_REQUEST_TIMEOUT = 25.0
CONNECT_TIMEOUT = 5.0


class BaseAIProvider(IOCRCapable, IAnalysisCapable):
    """Common behaviour for OCR + analysis capable LLM adapters."""

    NAME: str = ""
    CAPABILITIES: frozenset[Capability] = frozenset({Capability.OCR, Capability.ANALYSIS})
    # Vendors report no native OCR confidence; each adapter uses a fixed value.
    OCR_CONFIDENCE: float = 0.9
    # Characters of caller text embedded in the analysis prompt.
    TEXT_BUDGET: int = 3000
    TEMPERATURE: float = 0.1

    def __init__(self, api_key: str = "") -> None:
        self._descriptor = ProviderDescriptor(
            name=self.NAME,
            capabilities=self.CAPABILITIES,
            credential=SecretStr(api_key or ""),
        )
        self._logger = get_logger(__name__).bind(provider=self.NAME)

    # ------------------------------------------------------------------
    # IAIProvider implementation
    # ------------------------------------------------------------------

    @property
    def descriptor(self) -> ProviderDescriptor:
        return self._descriptor

    def is_configured(self) -> bool:
        return self._descriptor.has_credential

    async def is_available(self) -> bool:
        if not self.is_configured():
            return False
        try:
            return await self._probe()
        except Exception as exc:  # noqa: BLE001 - availability must never raise
            self._logger.warning("provider_probe_failed", error=str(exc))
            return False

    # ------------------------------------------------------------------
    # Capability implementations
    # ------------------------------------------------------------------

    async def extract_text(self, image_data: str) -> OCRResult:
        data_uri = parse_data_uri(image_data, provider_name=self.NAME)
        self._require_credential()

        start = time.perf_counter()
        raw_text = await self._request_ocr(data_uri)
        elapsed_ms = int((time.perf_counter() - start) * 1000)

        result = normalize_ocr(raw_text, self.OCR_CONFIDENCE, elapsed_ms, provider_name=self.NAME)
        self._logger.info(
            "ocr_extraction_complete",
            chars=len(result.text),
            processing_time_ms=elapsed_ms,
        )
        return result

    async def analyze_document(self, text: str) -> AnalysisResult:
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Document text must not be empty", provider_name=self.NAME)
        self._require_credential()

        prompt = build_analysis_prompt(truncate_text(text.strip(), self.TEXT_BUDGET))
        raw = await self._request_analysis(prompt)
        if not raw or not raw.strip():
            raise InvalidUpstreamResponseError(
                "No analysis content returned",
                provider_name=self.NAME,
            )

        payload = extract_json_object(raw, provider_name=self.NAME)
        result = normalize_analysis(payload, provider_name=self.NAME)
        self._logger.info(
            "document_analysis_complete",
            document_type=result.document_type,
            fields=len(result.extracted_data),
        )
        return result

    # ------------------------------------------------------------------
    # Vendor hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _request_ocr(self, image: DataURI) -> str | None:
        """Send the OCR request and return the raw text content."""

    @abstractmethod
    async def _request_analysis(self, prompt: str) -> str | None:
        """Send the analysis prompt and return the raw text content."""

    @abstractmethod
    async def _probe(self) -> bool:
        """Perform the cheapest authenticated round-trip the vendor offers."""

    def _require_credential(self) -> None:
        if not self.is_configured():
            raise InvalidCredentialError(
                f"{self.NAME} API key is not configured",
                provider_name=self.NAME,
            )

    def _api_key(self) -> str:
        return self._descriptor.credential.get_secret_value()
