"""Orchestration services: availability probing, provider fallback and request counters."""

from formai.services.availability_prober import AvailabilityProber
from formai.services.fallback_orchestrator import FallbackOrchestrator, classify_failure
from formai.services.request_metrics import RequestMetrics

__all__ = ["AvailabilityProber", "FallbackOrchestrator", "RequestMetrics", "classify_failure"]
