"""Capability-tagged interfaces for upstream AI providers.

A provider is any object implementing :class:`IAIProvider` plus one or
both of the capability interfaces:

    IOCRCapable       -- extract_text(image_data) -> OCRResult
    IAnalysisCapable  -- analyze_document(text)   -> AnalysisResult

The fallback orchestrator depends only on these ABCs, never on a concrete
adapter, so a new vendor is added by writing one class in
``formai/providers/ai/`` and listing it in ``config/config.yaml``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from formai.models.provider import Capability, ProviderDescriptor
from formai.models.results import AnalysisResult, OCRResult


# Concrete implementations: MistralOCRProvider, ClaudeAnalysisProvider,
# OpenAIFallbackProvider. Located in: formai/providers/ai/
class IAIProvider(ABC):
    """Identity and availability contract shared by every provider."""

    @property
    @abstractmethod
    def descriptor(self) -> ProviderDescriptor:
        """Return the immutable descriptor (name, capabilities, credential)."""

    def get_provider_name(self) -> str:
        """Return the unique provider name, e.g. ``"mistral-ocr"``."""
        return self.descriptor.name

    def supports(self, capability: Capability) -> bool:
        """Return ``True`` if the descriptor declares *capability*."""
        return self.descriptor.supports(capability)

    @abstractmethod
    def is_configured(self) -> bool:
        """Return ``True`` if a credential is present.

        Does not contact the upstream service.
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Return ``True`` if configured AND a minimal round-trip succeeds.

        Any network error or non-2xx response yields ``False``; this method
        never raises.
        """


class IOCRCapable(IAIProvider):
    """Provider that can read text out of a document image."""

    @abstractmethod
    async def extract_text(self, image_data: str) -> OCRResult:
        """Run OCR on an image supplied as ``data:<mime>;base64,<payload>``.

        Raises
        ------
        formai.utils.errors.InvalidInputError
            If *image_data* is not a well-formed data URI (no network call).
        formai.utils.errors.NoTextFoundError
            If the upstream found no readable text.
        formai.utils.errors.ProviderError
            Any other upstream failure, already mapped to the error taxonomy.
        """


class IAnalysisCapable(IAIProvider):
    """Provider that can extract structured data from document text."""

    @abstractmethod
    async def analyze_document(self, text: str) -> AnalysisResult:
        """Classify *text* and extract its fields.

        Raises
        ------
        formai.utils.errors.InvalidInputError
            If *text* is empty or whitespace-only (no network call).
        formai.utils.errors.InvalidUpstreamResponseError
            If the response does not contain a parseable JSON object.
        formai.utils.errors.ProviderError
            Any other upstream failure, already mapped to the error taxonomy.
        """
