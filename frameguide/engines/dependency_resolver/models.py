"""Data models for the dependency resolver engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dependency:
    """A declared package reference, as read from a manifest."""

    name: str
    version: str = ""  # raw specifier, e.g. "^3.22.0"
    is_dev: bool = False  # dev-only (npm) / indirect (go)


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency mapped to an exact version and its source repository."""

    name: str
    version: str  # exact, e.g. "3.24.4"
    url: str  # normalized https repo URL
    tag: str | None = None  # git tag to check out; None = default branch

    @property
    def key(self) -> str:
        return package_key(self.name, self.version)


def package_key(name: str, version: str) -> str:
    return f"{name}@{version}"
