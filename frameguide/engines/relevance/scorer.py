"""Relevance scorer — pick the cached frameworks that matter for a unit of work."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from frameguide.engines.relevance.catalog import FRAMEWORK_KEYWORDS, FRAMEWORK_TAG_MAP
from frameguide.engines.relevance.models import WorkUnit
from frameguide.engines.resource_manager.models import CachedResource

TAG_MATCH_POINTS = 2
MIN_RELEVANCE_SCORE = 2


def dependency_name_variants(name: str) -> list[str]:
    """Searchable lowercase variants: ``"@scope/name" -> ["scope", "name"]``."""
    if name.startswith("@"):
        return [part.lower() for part in name[1:].split("/", 1) if part]
    return [name.lower()]


def score_resource(
    resource: CachedResource,
    text: str,
    tag_candidates: set[str],
    keywords: Mapping[str, Sequence[str]],
) -> int:
    score = TAG_MATCH_POINTS if resource.name in tag_candidates else 0
    words = keywords.get(resource.name)
    if words:
        score += sum(1 for kw in words if kw.lower() in text)
    else:
        score += sum(1 for v in dependency_name_variants(resource.name) if v in text)
    return score


def score_resources(
    unit: WorkUnit | None,
    cached: Sequence[CachedResource],
    max_results: int,
    *,
    min_score: int = MIN_RELEVANCE_SCORE,
    keywords: Mapping[str, Sequence[str]] = FRAMEWORK_KEYWORDS,
    tag_map: Mapping[str, Sequence[str]] = FRAMEWORK_TAG_MAP,
) -> list[CachedResource]:
    """Return the resources relevant to *unit*, best first, at most *max_results*.

    A resource whose name a unit tag maps to earns 2 points. Each of its
    keywords found (case-insensitively) in the unit's title, description
    or acceptance criteria earns 1; resources without a keyword list use
    their name variants instead. Only resources scoring at least
    *min_score* qualify. Ties are broken by name.
    """
    if unit is None or not cached or max_results <= 0:
        return []

    tag_candidates: set[str] = set()
    for tag in unit.tags:
        tag_candidates.update(tag_map.get(tag.lower(), ()))

    text = unit.search_text()
    scored: list[tuple[int, CachedResource]] = []
    for res in cached:
        score = score_resource(res, text, tag_candidates, keywords)
        if score >= min_score:
            scored.append((score, res))
    scored.sort(key=lambda item: (-item[0], item[1].name))
    return [res for _, res in scored[:max_results]]


def all_resources(cached: Sequence[CachedResource], max_results: int) -> list[CachedResource]:
    """Feature-level selection: every cached resource, capped."""
    return list(cached[: max(max_results, 0)])
