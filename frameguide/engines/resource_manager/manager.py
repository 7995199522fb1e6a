"""ResourceManager — local checkouts of resolved framework sources."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

import structlog

from frameguide.core.fs import directory_size
from frameguide.engines.dependency_resolver.models import ResolvedDependency
from frameguide.engines.resource_manager.lock import CheckoutLock
from frameguide.engines.resource_manager.models import CachedResource, EnsureResult, Resource
from frameguide.engines.resource_manager.registry import (
    REGISTRY_FILENAME,
    CachedRepoMeta,
    ResourceRegistry,
)
from frameguide.engines.resource_manager.repo import GitRepositorySync, RepositorySync
from frameguide.exceptions import CheckoutLockTimeout, RepositorySyncError

log = structlog.get_logger("frameguide.engine")


def format_size(num_bytes: int) -> str:
    """Human-readable size: ``512B``, ``1.5KB``, ``2.0MB``, ``1.1GB``."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if num_bytes >= gb:
        return f"{num_bytes / gb:.1f}GB"
    if num_bytes >= mb:
        return f"{num_bytes / mb:.1f}MB"
    if num_bytes >= kb:
        return f"{num_bytes / kb:.1f}KB"
    return f"{num_bytes}B"


class ResourceManager:
    """Creates, refreshes and reports the checkouts for detected resources.

    Checkouts live at ``cache_dir / "<name>@<version>"``. The registry is
    mutated only from the manager's own sequential loop and saved once per
    :meth:`ensure_resources` call.
    """

    def __init__(
        self,
        cache_dir: Path,
        registry: ResourceRegistry,
        sync: RepositorySync | None = None,
    ) -> None:
        self.cache_dir = cache_dir
        self.registry = registry
        self._sync = sync or GitRepositorySync()
        self._detected: dict[str, Resource] = {}

    def checkout_path(self, key: str) -> Path:
        return self.cache_dir / key

    def detect(self, resolved: Iterable[ResolvedDependency]) -> list[Resource]:
        """Record *resolved* as the detected resources for this run."""
        for dep in resolved:
            res = Resource.from_resolved(dep)
            self._detected[res.key] = res
        return self.detected()

    def detected(self) -> list[Resource]:
        return sorted(self._detected.values(), key=lambda r: (r.name, r.version))

    # ── sync ─────────────────────────────────────────────────────────────

    async def ensure_resources(self, resolved: Iterable[ResolvedDependency]) -> EnsureResult:
        """Clone missing checkouts and refresh stale default-branch ones.

        Per-resource failures are logged and counted, never raised.
        """
        result = EnsureResult()
        resources = self.detect(resolved)
        if not resources:
            return result

        for res in resources:
            try:
                await self._ensure_one(res, result)
            except (RepositorySyncError, CheckoutLockTimeout, OSError) as exc:
                result.failed += 1
                log.warning("resources.sync_failed", resource=res.key, url=res.url, error=str(exc))

        try:
            self.registry.save(self.cache_dir)
        except OSError as exc:
            log.warning("resources.registry_save_failed", error=str(exc))

        log.info(
            "resources.ensured",
            cloned=result.cloned,
            updated=result.updated,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result

    async def _ensure_one(self, res: Resource, result: EnsureResult) -> None:
        path = self.checkout_path(res.key)
        async with CheckoutLock(path):
            meta = self.registry.get_repo(res.key)

            if self._sync.exists(path):
                tag = meta.tag if meta is not None else (res.ref or None)
                if tag:
                    # Tag-pinned content never changes.
                    result.skipped += 1
                    if meta is None:
                        await self._record(res, path, tag)
                    return
                if not await self._sync.is_stale(res.url, path):
                    result.skipped += 1
                    if meta is None:
                        await self._record(res, path, None)
                    return
                log.info("resources.updating", resource=res.key)
                await self._sync.update(path)
                result.updated += 1
                await self._record(res, path, None)
                return

            tag = res.ref or await self._sync.find_tag(res.url, res.version)
            if path.exists():
                # Leftover from an interrupted clone.
                shutil.rmtree(path)
            log.info("resources.cloning", resource=res.key, url=res.url, tag=tag)
            await self._sync.clone(res.url, path, tag)
            result.cloned += 1
            await self._record(res, path, tag)

    async def _record(self, res: Resource, path: Path, tag: str | None) -> None:
        commit = await self._sync.head_commit(path)
        self.registry.update_repo(
            res.key,
            CachedRepoMeta(
                url=res.url,
                tag=tag,
                version=res.version,
                commit=commit,
                size=directory_size(path),
            ),
        )

    # ── queries ──────────────────────────────────────────────────────────

    def get_cached_resources(self) -> list[CachedResource]:
        """Detected resources whose checkout is present on disk, sorted by name."""
        cached: list[CachedResource] = []
        for res in self.detected():
            path = self.checkout_path(res.key)
            if not self._sync.exists(path):
                continue
            meta = self.registry.get_repo(res.key)
            cached.append(
                CachedResource(
                    name=res.name,
                    version=res.version,
                    path=path.resolve(),
                    url=res.url,
                    ref=(meta.tag if meta is not None else None) or res.ref,
                    commit=meta.commit if meta is not None else "",
                )
            )
        return cached

    def cache_size(self) -> int:
        return self.registry.total_size

    def clear_cache(self) -> None:
        """Remove every checkout; the registry file is kept but reset."""
        if self.cache_dir.is_dir():
            for entry in self.cache_dir.iterdir():
                if entry.name == REGISTRY_FILENAME:
                    continue
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
        self.registry = ResourceRegistry()
        self.registry.save(self.cache_dir)
        log.info("resources.cache_cleared", cache_dir=str(self.cache_dir))
