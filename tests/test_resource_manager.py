"""Tests for the resource manager, checkout lock and git sync helpers."""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path

import pytest

from frameguide.engines.dependency_resolver.models import ResolvedDependency
from frameguide.engines.resource_manager.lock import CheckoutLock
from frameguide.engines.resource_manager.manager import ResourceManager, format_size
from frameguide.engines.resource_manager.registry import (
    REGISTRY_FILENAME,
    CachedRepoMeta,
    ResourceRegistry,
)
from frameguide.engines.resource_manager.repo import RepositorySync, find_version_tag
from frameguide.exceptions import CheckoutLockTimeout, RepositorySyncError


class FakeSync:
    """In-memory stand-in for git: a checkout is a dir with a ``.git`` marker."""

    def __init__(self, tags: dict[str, str] | None = None, stale: bool = False) -> None:
        self.tags = tags or {}
        self.stale = stale
        self.fail_urls: set[str] = set()
        self.calls: list[tuple] = []

    def exists(self, path: Path) -> bool:
        return (path / ".git").exists()

    async def clone(self, url: str, path: Path, ref: str | None = None) -> None:
        self.calls.append(("clone", url, ref))
        if url in self.fail_urls:
            raise RepositorySyncError(f"clone failed: {url}")
        (path / ".git").mkdir(parents=True)
        (path / "README.md").write_text("x" * 100)

    async def is_stale(self, url: str, path: Path) -> bool:
        self.calls.append(("is_stale", url))
        return self.stale

    async def update(self, path: Path) -> None:
        self.calls.append(("update", str(path)))

    async def find_tag(self, url: str, version: str) -> str | None:
        self.calls.append(("find_tag", url, version))
        return self.tags.get(version)

    async def head_commit(self, path: Path) -> str:
        return "abc1234"


def _dep(name: str, version: str, tag: str | None = None) -> ResolvedDependency:
    return ResolvedDependency(name, version, f"https://github.com/x/{name.strip('@')}", tag)


@pytest.fixture
def fake_sync() -> FakeSync:
    return FakeSync()


@pytest.fixture
def manager(tmp_path, fake_sync) -> ResourceManager:
    return ResourceManager(tmp_path, ResourceRegistry.load(tmp_path), fake_sync)


class TestEnsureResources:
    def test_fake_satisfies_protocol(self, fake_sync):
        assert isinstance(fake_sync, RepositorySync)

    @pytest.mark.asyncio
    async def test_clone_new_with_resolved_tag(self, manager, fake_sync, tmp_path):
        result = await manager.ensure_resources([_dep("zod", "3.24.4", "v3.24.4")])

        assert (result.cloned, result.updated, result.skipped, result.failed) == (1, 0, 0, 0)
        assert ("clone", "https://github.com/x/zod", "v3.24.4") in fake_sync.calls
        assert not any(c[0] == "find_tag" for c in fake_sync.calls)
        meta = manager.registry.get_repo("zod@3.24.4")
        assert meta.tag == "v3.24.4"
        assert meta.commit == "abc1234"
        assert meta.size >= 100
        assert manager.cache_size() == meta.size
        # registry persisted once at the end
        saved = json.loads((tmp_path / REGISTRY_FILENAME).read_text())
        assert "zod@3.24.4" in saved["repos"]

    @pytest.mark.asyncio
    async def test_late_tag_lookup(self, manager, fake_sync):
        fake_sync.tags = {"15.0.0": "v15.0.0"}
        await manager.ensure_resources([_dep("next", "15.0.0")])
        assert ("find_tag", "https://github.com/x/next", "15.0.0") in fake_sync.calls
        assert ("clone", "https://github.com/x/next", "v15.0.0") in fake_sync.calls

    @pytest.mark.asyncio
    async def test_default_branch_when_no_tag(self, manager, fake_sync):
        await manager.ensure_resources([_dep("pino", "8.1.0")])
        assert ("clone", "https://github.com/x/pino", None) in fake_sync.calls
        assert manager.registry.get_repo("pino@8.1.0").tag is None

    @pytest.mark.asyncio
    async def test_tag_pinned_checkout_never_resynced(self, manager, fake_sync):
        await manager.ensure_resources([_dep("zod", "3.24.4", "v3.24.4")])
        fake_sync.calls.clear()

        result = await manager.ensure_resources([_dep("zod", "3.24.4", "v3.24.4")])

        assert result.skipped == 1
        assert fake_sync.calls == []

    @pytest.mark.asyncio
    async def test_stale_default_branch_updated(self, manager, fake_sync):
        await manager.ensure_resources([_dep("pino", "8.1.0")])
        fake_sync.stale = True

        result = await manager.ensure_resources([_dep("pino", "8.1.0")])

        assert result.updated == 1
        assert fake_sync.calls[-1][0] == "update"

    @pytest.mark.asyncio
    async def test_fresh_default_branch_skipped(self, manager, fake_sync):
        await manager.ensure_resources([_dep("pino", "8.1.0")])
        result = await manager.ensure_resources([_dep("pino", "8.1.0")])
        assert result.skipped == 1
        assert not any(c[0] == "update" for c in fake_sync.calls)

    @pytest.mark.asyncio
    async def test_failure_is_counted_not_raised(self, manager, fake_sync):
        fake_sync.fail_urls.add("https://github.com/x/broken")
        result = await manager.ensure_resources([_dep("broken", "1.0.0"), _dep("zod", "3.24.4", "v3.24.4")])
        assert result.failed == 1
        assert result.cloned == 1
        assert manager.registry.get_repo("broken@1.0.0") is None

    @pytest.mark.asyncio
    async def test_partial_checkout_is_replaced(self, manager, fake_sync, tmp_path):
        leftover = tmp_path / "zod@3.24.4"
        leftover.mkdir()
        (leftover / "half-written").write_text("x")

        await manager.ensure_resources([_dep("zod", "3.24.4", "v3.24.4")])

        assert not (leftover / "half-written").exists()
        assert (leftover / ".git").is_dir()


class TestQueries:
    @pytest.mark.asyncio
    async def test_get_cached_resources_only_on_disk_sorted(self, manager, fake_sync, tmp_path):
        fake_sync.fail_urls.add("https://github.com/x/broken")
        await manager.ensure_resources(
            [_dep("zod", "3.24.4", "v3.24.4"), _dep("broken", "1.0.0"), _dep("@prisma/client", "5.22.0")]
        )

        cached = manager.get_cached_resources()

        assert [c.name for c in cached] == ["@prisma/client", "zod"]
        zod = cached[1]
        assert zod.path == (tmp_path / "zod@3.24.4").resolve()
        assert zod.ref == "v3.24.4"
        assert zod.commit == "abc1234"

    def test_detected_but_not_synced_is_absent(self, manager):
        manager.detect([_dep("zod", "3.24.4")])
        assert manager.get_cached_resources() == []

    @pytest.mark.asyncio
    async def test_clear_cache(self, manager, tmp_path):
        await manager.ensure_resources([_dep("zod", "3.24.4", "v3.24.4")])

        manager.clear_cache()

        assert [p.name for p in tmp_path.iterdir()] == [REGISTRY_FILENAME]
        assert manager.cache_size() == 0
        assert ResourceRegistry.load(tmp_path).repos == {}

    @pytest.mark.parametrize(
        "size, expected",
        [(512, "512B"), (1536, "1.5KB"), (2 * 1024 * 1024, "2.0MB"), (3 * 1024**3, "3.0GB")],
    )
    def test_format_size(self, size, expected):
        assert format_size(size) == expected


class TestFindVersionTag:
    OUTPUT = "\n".join(
        [
            "aaa\trefs/tags/3.24.4",
            "bbb\trefs/tags/v3.24.4",
            "ccc\trefs/tags/v3.24.4^{}",
            "ddd\trefs/tags/next@15.0.0",
            "eee\trefs/tags/v1.0.0^{}",
        ]
    )

    def test_v_prefix_preferred(self):
        assert find_version_tag(self.OUTPUT, "3.24.4") == "v3.24.4"

    def test_monorepo_suffix(self):
        assert find_version_tag(self.OUTPUT, "15.0.0") == "next@15.0.0"

    def test_peeled_refs_ignored(self):
        assert find_version_tag(self.OUTPUT, "1.0.0") is None

    def test_empty_version(self):
        assert find_version_tag(self.OUTPUT, "") is None


class TestCheckoutLock:
    @pytest.mark.asyncio
    async def test_exclusive(self, tmp_path):
        checkout = tmp_path / "zod@3.24.4"
        async with CheckoutLock(checkout) as lock:
            assert lock.path.exists()
            other = CheckoutLock(checkout, timeout=0.1, poll_interval=0.01)
            with pytest.raises(CheckoutLockTimeout):
                await other.acquire()
        assert not lock.path.exists()

    @pytest.mark.asyncio
    async def test_waiter_gets_lock_after_release(self, tmp_path):
        checkout = tmp_path / "zod@3.24.4"
        first = CheckoutLock(checkout)
        await first.acquire()

        async def _release_later() -> None:
            await asyncio.sleep(0.05)
            first.release()

        releaser = asyncio.create_task(_release_later())
        async with CheckoutLock(checkout, timeout=2, poll_interval=0.01):
            pass
        await releaser

    @pytest.mark.asyncio
    async def test_dead_holder_is_broken(self, tmp_path):
        checkout = tmp_path / "zod@3.24.4"
        lock_path = tmp_path / "zod@3.24.4.lock"
        # PIDs are positive; a huge one is never alive.
        lock_path.write_text(json.dumps({"pid": 2**22 + 12345, "started_at": time.time()}))
        async with CheckoutLock(checkout, timeout=0.5, poll_interval=0.01):
            assert json.loads(lock_path.read_text())["pid"] == os.getpid()

    @pytest.mark.asyncio
    async def test_old_lock_is_broken(self, tmp_path):
        checkout = tmp_path / "zod@3.24.4"
        lock_path = tmp_path / "zod@3.24.4.lock"
        lock_path.write_text(json.dumps({"pid": os.getpid(), "started_at": time.time() - 10}))
        async with CheckoutLock(checkout, timeout=0.5, stale_after=1, poll_interval=0.01):
            pass
