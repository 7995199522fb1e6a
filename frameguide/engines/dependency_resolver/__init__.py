"""Dependency resolver engine — lock files + package registries -> source repos."""

from frameguide.engines.dependency_resolver.models import Dependency, ResolvedDependency
from frameguide.engines.dependency_resolver.normalize import normalize_repo_url
from frameguide.engines.dependency_resolver.resolver import resolve_all, resolve_exact_versions
from frameguide.engines.dependency_resolver.versions import (
    clean_version,
    ecosystem_from_tech_stack,
    should_resolve,
    split_at_version,
)

__all__ = [
    "Dependency",
    "ResolvedDependency",
    "clean_version",
    "ecosystem_from_tech_stack",
    "normalize_repo_url",
    "resolve_all",
    "resolve_exact_versions",
    "should_resolve",
    "split_at_version",
]
