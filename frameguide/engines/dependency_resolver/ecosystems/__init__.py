"""Ecosystem resolvers — auto-registered on import."""

from frameguide.engines.dependency_resolver.ecosystems import (
    crates,  # noqa: F401
    go,  # noqa: F401
    hex_pm,  # noqa: F401
    npm,  # noqa: F401
    pypi,  # noqa: F401
)
from frameguide.engines.dependency_resolver.ecosystems.base import (
    RESOLVER_REGISTRY,
    resolve_repo_url,
)

__all__ = ["RESOLVER_REGISTRY", "resolve_repo_url"]
