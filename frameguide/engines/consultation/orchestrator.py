"""ConsultationOrchestrator — select, consult and partition framework guidance."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path

import structlog

from frameguide.core.config import ProviderConfig
from frameguide.core.pool import fan_out
from frameguide.engines.consultation.cache import (
    GuidanceCache,
    consult_cache_key,
    feature_consult_cache_key,
)
from frameguide.engines.consultation.models import ConsultationResult, ResourceConsultation
from frameguide.engines.consultation.prompts import PromptTemplates
from frameguide.engines.consultation.runner import run_consult_subprocess
from frameguide.engines.relevance.models import WorkUnit
from frameguide.engines.relevance.scorer import (
    MIN_RELEVANCE_SCORE,
    all_resources,
    score_resources,
)
from frameguide.engines.resource_manager.models import CachedResource
from frameguide.exceptions import ConsultationError, FailureKind

log = structlog.get_logger("frameguide.engine")

CONSULT_TIMEOUT = 120.0  # seconds per framework
MAX_FRAMEWORKS = 3
GUIDANCE_MIN_WORDS = 200
GUIDANCE_MAX_WORDS = 400


def _display_name(resource: CachedResource) -> str:
    return f"{resource.name} v{resource.version}" if resource.version else resource.name


class ConsultationOrchestrator:
    """Runs one consult subprocess per selected framework, concurrently."""

    def __init__(
        self,
        provider: ProviderConfig,
        templates: PromptTemplates | None = None,
        cache: GuidanceCache | None = None,
        timeout: float = CONSULT_TIMEOUT,
        max_frameworks: int = MAX_FRAMEWORKS,
        *,
        min_score: int = MIN_RELEVANCE_SCORE,
        min_words: int = GUIDANCE_MIN_WORDS,
        max_words: int = GUIDANCE_MAX_WORDS,
        tech_stack: str = "",
        cwd: Path | None = None,
    ) -> None:
        self._provider = provider
        self._templates = templates if templates is not None else PromptTemplates()
        self._cache = cache
        self._timeout = timeout
        self._max_frameworks = max_frameworks
        self._min_score = min_score
        self._min_words = min_words
        self._max_words = max_words
        self._tech_stack = tech_stack
        self._cwd = cwd

    # ── single consultation ──────────────────────────────────────────────

    async def consult(
        self,
        resource: CachedResource,
        prompt: str,
        *,
        cache_key: str | None = None,
        timeout: float | None = None,
    ) -> ResourceConsultation:
        """Consult one framework; consultation failures land in ``error``.

        With a *cache_key* and a cache, a stored answer short-circuits the
        subprocess and a fresh success is stored before returning.
        """
        if cache_key and self._cache is not None:
            hit = self._cache.load(cache_key)
            if hit is not None:
                log.debug("consult.cache_hit", framework=resource.name, key=cache_key)
                return ResourceConsultation(framework=resource.name, guidance=hit, cached=True)

        start = time.monotonic()
        try:
            guidance = await run_consult_subprocess(
                self._provider,
                prompt,
                self._timeout if timeout is None else timeout,
                cwd=self._cwd,
            )
        except ConsultationError as exc:
            duration = time.monotonic() - start
            log.warning(
                "consult.failed",
                framework=resource.name,
                kind=exc.kind.value,
                error=str(exc),
                duration=round(duration, 2),
            )
            return ResourceConsultation(framework=resource.name, duration=duration, error=exc)

        duration = time.monotonic() - start
        if cache_key and self._cache is not None:
            try:
                self._cache.store(cache_key, guidance)
            except OSError as exc:
                log.warning("consult.cache_write_failed", key=cache_key, error=str(exc))

        log.info("consult.done", framework=resource.name, duration=round(duration, 2))
        return ResourceConsultation(framework=resource.name, guidance=guidance, duration=duration)

    # ── batches ──────────────────────────────────────────────────────────

    async def consult_for_unit(
        self, unit: WorkUnit, cached: Sequence[CachedResource]
    ) -> ConsultationResult:
        """Consult every framework relevant to *unit*."""
        selected = score_resources(unit, cached, self._max_frameworks, min_score=self._min_score)
        criteria = "\n".join(f"- {c}" for c in unit.acceptance_criteria)

        def _job(res: CachedResource) -> tuple[str, str]:
            prompt = self._templates.render(
                "consult",
                framework=_display_name(res),
                framework_path=str(res.path),
                unit_id=unit.id,
                unit_title=unit.title,
                unit_description=unit.description,
                acceptance_criteria=criteria,
                tech_stack=self._tech_stack,
                min_words=self._min_words,
                max_words=self._max_words,
            )
            return prompt, consult_cache_key(unit.id, res.name, res.commit, unit.description)

        return await self._run_batch(selected, _job)

    async def consult_for_feature(
        self, feature: str, cached: Sequence[CachedResource]
    ) -> ConsultationResult:
        """Consult every cached framework (capped) for a whole feature."""
        selected = all_resources(cached, self._max_frameworks)

        def _job(res: CachedResource) -> tuple[str, str]:
            prompt = self._templates.render(
                "consult-feature",
                framework=_display_name(res),
                framework_path=str(res.path),
                feature=feature,
                tech_stack=self._tech_stack,
                min_words=self._min_words,
                max_words=self._max_words,
            )
            return prompt, feature_consult_cache_key(feature, res.name, res.commit)

        return await self._run_batch(selected, _job)

    async def _run_batch(
        self,
        selected: list[CachedResource],
        job: Callable[[CachedResource], tuple[str, str]],
    ) -> ConsultationResult:
        result = ConsultationResult()
        if not selected:
            return result

        async def _one(res: CachedResource) -> tuple[CachedResource, ResourceConsultation]:
            try:
                prompt, key = job(res)
                return res, await self.consult(res, prompt, cache_key=key)
            except Exception as exc:
                # Anything else is contained per framework, as a process error.
                log.error("consult.unexpected_failure", framework=res.name, exc_info=True)
                error = ConsultationError(
                    FailureKind.PROCESS_ERROR, f"{type(exc).__name__}: {exc}"
                )
                return res, ResourceConsultation(framework=res.name, error=error)

        # One task per resource; the selection is already capped.
        outcomes = await fan_out(selected, _one, width=len(selected))

        for res, consultation in outcomes:
            if consultation.ok:
                result.consultations.append(consultation)
            else:
                result.fallback_paths.append(res)

        result.consultations.sort(key=lambda c: c.framework)
        result.fallback_paths.sort(key=lambda r: r.name)
        log.info(
            "consult.batch_done",
            succeeded=len(result.consultations),
            fallback=len(result.fallback_paths),
        )
        return result
