"""Consultation engine — citation-bearing guidance from a reasoning subprocess."""

from frameguide.engines.consultation.cache import (
    GuidanceCache,
    consult_cache_key,
    feature_consult_cache_key,
)
from frameguide.engines.consultation.formatter import FALLBACK_INSTRUCTIONS, format_guidance
from frameguide.engines.consultation.markers import (
    GUIDANCE_END,
    GUIDANCE_START,
    GuidanceCollector,
    extract_between_markers,
)
from frameguide.engines.consultation.models import ConsultationResult, ResourceConsultation
from frameguide.engines.consultation.orchestrator import ConsultationOrchestrator
from frameguide.engines.consultation.prompts import PromptTemplates
from frameguide.engines.consultation.runner import run_consult_subprocess

__all__ = [
    "FALLBACK_INSTRUCTIONS",
    "GUIDANCE_END",
    "GUIDANCE_START",
    "ConsultationOrchestrator",
    "ConsultationResult",
    "GuidanceCache",
    "GuidanceCollector",
    "PromptTemplates",
    "ResourceConsultation",
    "consult_cache_key",
    "extract_between_markers",
    "feature_consult_cache_key",
    "format_guidance",
    "run_consult_subprocess",
]
