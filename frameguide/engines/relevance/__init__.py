"""Relevance engine — score cached frameworks against a unit of work."""

from frameguide.engines.relevance.catalog import FRAMEWORK_KEYWORDS, FRAMEWORK_TAG_MAP
from frameguide.engines.relevance.models import WorkUnit
from frameguide.engines.relevance.scorer import (
    all_resources,
    dependency_name_variants,
    score_resources,
)

__all__ = [
    "FRAMEWORK_KEYWORDS",
    "FRAMEWORK_TAG_MAP",
    "WorkUnit",
    "all_resources",
    "dependency_name_variants",
    "score_resources",
]
