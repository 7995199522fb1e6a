"""Resource manager engine — cached checkouts of framework source repos."""

from frameguide.engines.resource_manager.manager import ResourceManager, format_size
from frameguide.engines.resource_manager.models import CachedResource, EnsureResult, Resource
from frameguide.engines.resource_manager.registry import (
    CachedRepoMeta,
    ResolvedEntry,
    ResourceRegistry,
)
from frameguide.engines.resource_manager.repo import GitRepositorySync, RepositorySync

__all__ = [
    "CachedRepoMeta",
    "CachedResource",
    "EnsureResult",
    "GitRepositorySync",
    "RepositorySync",
    "Resource",
    "ResolvedEntry",
    "ResourceManager",
    "ResourceRegistry",
    "format_size",
]
