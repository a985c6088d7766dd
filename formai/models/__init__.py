"""formai domain models -- re-exports all public model classes.

    - provider.py -- provider identity, capabilities, health, attempt history
    - results.py  -- canonical OCR and analysis results
"""

from __future__ import annotations

from formai.models.provider import (
    Capability,
    FailureClass,
    ProviderAttempt,
    ProviderDescriptor,
    ProviderHealth,
)
from formai.models.results import AnalysisResult, OCRResult

__all__ = [
    "AnalysisResult",
    "Capability",
    "FailureClass",
    "OCRResult",
    "ProviderAttempt",
    "ProviderDescriptor",
    "ProviderHealth",
]
