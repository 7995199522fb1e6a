"""Dependency resolver — declared dependencies -> exact versions + repo URLs."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import httpx
import structlog

# Ensure readers and resolvers are registered before any resolution runs.
import frameguide.engines.dependency_resolver.ecosystems  # noqa: F401
import frameguide.engines.dependency_resolver.lockfiles  # noqa: F401
from frameguide.core.pool import fan_out
from frameguide.engines.dependency_resolver.ecosystems.base import (
    RESOLVER_REGISTRY,
    resolve_repo_url,
)
from frameguide.engines.dependency_resolver.lockfiles.registry import read_lock_versions
from frameguide.engines.dependency_resolver.models import (
    Dependency,
    ResolvedDependency,
    package_key,
)
from frameguide.engines.dependency_resolver.versions import (
    clean_version,
    normalize_python_name,
    should_resolve,
)
from frameguide.engines.resource_manager.registry import ResourceRegistry
from frameguide.exceptions import BadResponseError, ResolutionError

log = structlog.get_logger("frameguide.engine")

RESOLVE_WORKERS = 5
RESOLVE_HTTP_TIMEOUT = 10.0  # seconds, per registry request


def resolve_exact_versions(
    deps: Sequence[Dependency], ecosystem: str, project_root: Path
) -> dict[str, str]:
    """Map dependency names to exact versions without touching the network.

    Go requirements are already exact. Everything else prefers the first
    lock file that yields entries and falls back to the cleaned manifest
    specifier.
    """
    if ecosystem == "go":
        return {d.name: d.version.removeprefix("v") for d in deps if d.version}

    locked = read_lock_versions(ecosystem, project_root)
    lock_versions: dict[str, str] = {}
    if locked is not None:
        lock_name, lock_versions = locked
        log.debug("resolver.lockfile", lockfile=lock_name, entries=len(lock_versions))

    versions: dict[str, str] = {}
    for d in deps:
        lookup = normalize_python_name(d.name) if ecosystem == "pypi" else d.name
        exact = lock_versions.get(lookup)
        if exact:
            versions[d.name] = exact
        elif d.version:
            versions[d.name] = clean_version(d.version)
    return versions


@dataclass
class _Lookup:
    name: str
    version: str
    url: str | None = None
    error: ResolutionError | None = None


async def resolve_all(
    deps: Sequence[Dependency],
    ecosystem: str,
    project_root: Path,
    registry: ResourceRegistry | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    workers: int = RESOLVE_WORKERS,
    http_timeout: float = RESOLVE_HTTP_TIMEOUT,
) -> list[ResolvedDependency]:
    """Resolve repo URLs and exact versions for *deps*.

    Best effort per package: a failed lookup marks the package unresolvable
    in *registry* and is otherwise only logged. Registry hits (cached
    checkout, then the URL memo) skip the network. Network lookups run on
    a fixed-width worker pool; every registry mutation happens after the
    pool has joined. The result is deduplicated by ``name@version``.
    """
    if not deps:
        return []
    if ecosystem not in RESOLVER_REGISTRY:
        log.warning("resolver.unsupported_ecosystem", ecosystem=ecosystem)
        return []

    versions = resolve_exact_versions(deps, ecosystem, project_root)

    resolved: list[ResolvedDependency] = []
    pending: dict[str, tuple[str, str]] = {}
    for dep in deps:
        if not should_resolve(dep, ecosystem):
            continue
        if registry is not None and registry.is_unresolvable(dep.name):
            continue

        version = versions.get(dep.name, "")
        key = package_key(dep.name, version)

        if registry is not None:
            meta = registry.get_repo(key)
            if meta is not None:
                resolved.append(ResolvedDependency(dep.name, version, meta.url, meta.tag))
                continue
            url = registry.get_resolved_url(dep.name)
            if url:
                resolved.append(ResolvedDependency(dep.name, version, url))
                continue

        pending.setdefault(key, (dep.name, version))

    if pending:
        lookups = await _lookup_all(
            list(pending.values()), ecosystem, client, workers, http_timeout
        )
        for lookup in lookups:
            if lookup.error is not None or lookup.url is None:
                log.info(
                    "resolver.unresolvable",
                    package=lookup.name,
                    ecosystem=ecosystem,
                    error=str(lookup.error),
                    kind=type(lookup.error).__name__,
                )
                if registry is not None:
                    registry.mark_unresolvable(lookup.name)
                continue
            if registry is not None:
                registry.set_resolved_url(lookup.name, lookup.url)
            resolved.append(ResolvedDependency(lookup.name, lookup.version, lookup.url))

    seen: set[str] = set()
    unique: list[ResolvedDependency] = []
    for dep in resolved:
        if dep.key in seen:
            continue
        seen.add(dep.key)
        unique.append(dep)

    log.info(
        "resolver.done",
        ecosystem=ecosystem,
        declared=len(deps),
        looked_up=len(pending),
        resolved=len(unique),
    )
    return unique


async def _lookup_all(
    items: list[tuple[str, str]],
    ecosystem: str,
    client: httpx.AsyncClient | None,
    workers: int,
    http_timeout: float,
) -> list[_Lookup]:
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=http_timeout, follow_redirects=True)

    async def _lookup(item: tuple[str, str]) -> _Lookup:
        name, version = item
        try:
            url = await resolve_repo_url(name, ecosystem, http)
        except ResolutionError as exc:
            return _Lookup(name, version, error=exc)
        except Exception as exc:
            log.exception("resolver.lookup_crashed", package=name)
            return _Lookup(name, version, error=BadResponseError(name, str(exc)))
        return _Lookup(name, version, url=url)

    try:
        return await fan_out(items, _lookup, width=workers)
    finally:
        if owns_client:
            await http.aclose()
