"""GuidanceService — one entry point from declared dependencies to a guidance block."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import httpx
import structlog

from frameguide.core.config import Settings
from frameguide.engines.consultation import (
    FALLBACK_INSTRUCTIONS,
    ConsultationOrchestrator,
    GuidanceCache,
    PromptTemplates,
    format_guidance,
)
from frameguide.engines.dependency_resolver import Dependency, resolve_all
from frameguide.engines.relevance import WorkUnit
from frameguide.engines.resource_manager import (
    EnsureResult,
    RepositorySync,
    ResourceManager,
    ResourceRegistry,
)

log = structlog.get_logger("frameguide.service")

CONSULTATIONS_DIRNAME = "consultations"


class GuidanceService:
    """Resolve, cache and consult framework sources for one project."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        project_root: Path | None = None,
        tech_stack: str = "",
        sync: RepositorySync | None = None,
        templates: PromptTemplates | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.project_root = project_root
        self.tech_stack = tech_stack
        self._templates = templates
        self._client = client
        registry = ResourceRegistry.load(self.settings.cache_dir)
        self.manager = ResourceManager(self.settings.cache_dir, registry, sync)

    @property
    def registry(self) -> ResourceRegistry:
        return self.manager.registry

    async def prepare_resources(
        self,
        deps: Sequence[Dependency],
        ecosystem: str,
        project_root: Path | None = None,
    ) -> EnsureResult:
        """Resolve *deps* and make sure their checkouts exist and are fresh."""
        if not self.settings.resources_enabled:
            return EnsureResult()
        root = project_root or self.project_root or Path.cwd()

        resolved = await resolve_all(
            deps,
            ecosystem,
            root,
            self.registry,
            client=self._client,
            workers=self.settings.resolve_workers,
            http_timeout=self.settings.http_timeout,
        )
        if not resolved:
            # Nothing to sync, but lookups may have updated the memos.
            self.registry.save(self.settings.cache_dir)
            return EnsureResult()
        return await self.manager.ensure_resources(resolved)

    async def guidance_for_unit(self, unit: WorkUnit, feature_dir: Path) -> str:
        """Formatted guidance for one unit of work, or the web-search fallback."""
        if not self.settings.resources_enabled:
            return FALLBACK_INSTRUCTIONS
        cached = self.manager.get_cached_resources()
        if not cached:
            log.debug("service.no_cached_resources", unit=unit.id)
            return FALLBACK_INSTRUCTIONS
        result = await self._orchestrator(feature_dir).consult_for_unit(unit, cached)
        return format_guidance(result)

    async def guidance_for_feature(self, feature: str, feature_dir: Path) -> str:
        """Formatted guidance covering a whole feature."""
        if not self.settings.resources_enabled:
            return FALLBACK_INSTRUCTIONS
        cached = self.manager.get_cached_resources()
        if not cached:
            log.debug("service.no_cached_resources", feature=feature)
            return FALLBACK_INSTRUCTIONS
        result = await self._orchestrator(feature_dir).consult_for_feature(feature, cached)
        return format_guidance(result)

    def _orchestrator(self, feature_dir: Path) -> ConsultationOrchestrator:
        s = self.settings
        return ConsultationOrchestrator(
            s.provider,
            self._templates,
            GuidanceCache(feature_dir / CONSULTATIONS_DIRNAME),
            s.consult_timeout,
            s.max_frameworks,
            min_score=s.min_relevance_score,
            min_words=s.guidance_min_words,
            max_words=s.guidance_max_words,
            tech_stack=self.tech_stack,
            cwd=self.project_root,
        )
