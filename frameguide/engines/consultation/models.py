"""Data models for the consultation engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from frameguide.engines.resource_manager.models import CachedResource
from frameguide.exceptions import ConsultationError


@dataclass
class ResourceConsultation:
    """Outcome of consulting one framework."""

    framework: str
    guidance: str = ""
    duration: float = 0.0  # seconds; 0.0 for cache hits
    error: ConsultationError | None = None
    cached: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ConsultationResult:
    consultations: list[ResourceConsultation] = field(default_factory=list)
    fallback_paths: list[CachedResource] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.consultations and not self.fallback_paths
