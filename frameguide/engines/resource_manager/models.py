"""Data models for the resource manager."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from frameguide.engines.dependency_resolver.models import ResolvedDependency, package_key


@dataclass(frozen=True)
class Resource:
    """A detected resource: a resolved dependency with a source repo to cache."""

    name: str
    url: str
    ref: str = ""  # tag; empty means the remote's default branch
    version: str = ""

    @property
    def key(self) -> str:
        return package_key(self.name, self.version)

    @classmethod
    def from_resolved(cls, dep: ResolvedDependency) -> Resource:
        return cls(name=dep.name, url=dep.url, ref=dep.tag or "", version=dep.version)


@dataclass(frozen=True)
class CachedResource:
    """A resource whose checkout was verified present on disk."""

    name: str
    version: str
    path: Path
    url: str
    ref: str = ""
    commit: str = ""

    @property
    def key(self) -> str:
        return package_key(self.name, self.version)


@dataclass
class EnsureResult:
    cloned: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def changed(self) -> bool:
        return self.cloned > 0 or self.updated > 0
