"""ResourceRegistry — persisted metadata for cached checkouts and lookups.

Three independent record classes live in one ``registry.json``:

* ``repos`` — ``name@version`` -> metadata of a checkout that exists on disk
* ``resolved`` — package name -> resolved repo URL (expires after 30 days)
* ``unresolvable`` — package name -> last failed lookup (expires after 7 days)

Expired entries are removed lazily, on the read that finds them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from frameguide.core.fs import atomic_write_text

log = structlog.get_logger("frameguide.engine")

REGISTRY_FILENAME = "registry.json"

RESOLVED_URL_EXPIRY = timedelta(days=30)
UNRESOLVABLE_EXPIRY = timedelta(days=7)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class CachedRepoMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    tag: str | None = None  # None = default-branch checkout
    version: str = ""
    commit: str = ""
    synced_at: datetime = Field(default_factory=_utcnow, alias="syncedAt")
    size: int = Field(0, alias="sizeBytes")


class ResolvedEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    resolved_at: datetime = Field(default_factory=_utcnow, alias="resolvedAt")


class ResourceRegistry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    repos: dict[str, CachedRepoMeta] = Field(default_factory=dict)
    total_size: int = Field(0, alias="totalSize")
    resolved: dict[str, ResolvedEntry] = Field(default_factory=dict)
    unresolvable: dict[str, datetime] = Field(default_factory=dict)

    @model_validator(mode="after")
    def recompute_total(self) -> ResourceRegistry:
        self.total_size = sum(meta.size for meta in self.repos.values())
        return self

    # ── persistence ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, cache_dir: Path) -> ResourceRegistry:
        """Load the registry from *cache_dir*, creating the directory if needed.

        A missing file yields an empty registry; so does a corrupted one.
        """
        cache_dir.mkdir(parents=True, exist_ok=True)
        path = cache_dir / REGISTRY_FILENAME
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return cls()
        except OSError as exc:
            log.warning("registry.unreadable", path=str(path), error=str(exc))
            return cls()
        try:
            return cls.model_validate_json(raw)
        except ValueError:  # ValidationError, including bytes that are not UTF-8
            log.warning("registry.corrupted", path=str(path))
            return cls()

    def save(self, cache_dir: Path) -> None:
        """Atomically write the registry to *cache_dir*."""
        payload = self.model_dump_json(by_alias=True, indent=2)
        atomic_write_text(cache_dir / REGISTRY_FILENAME, payload + "\n")

    # ── cached repos ─────────────────────────────────────────────────────

    def get_repo(self, key: str) -> CachedRepoMeta | None:
        return self.repos.get(key)

    def update_repo(self, key: str, meta: CachedRepoMeta) -> None:
        """Insert or replace *key*, keeping ``total_size`` equal to the sum of sizes."""
        existing = self.repos.get(key)
        if existing is not None:
            self.total_size -= existing.size
        self.total_size += meta.size
        self.repos[key] = meta

    def remove_repo(self, key: str) -> None:
        existing = self.repos.pop(key, None)
        if existing is not None:
            self.total_size -= existing.size

    def list_cached(self) -> list[str]:
        return sorted(self.repos)

    # ── resolved-URL memo ────────────────────────────────────────────────

    def get_resolved_url(self, name: str, *, now: datetime | None = None) -> str | None:
        entry = self.resolved.get(name)
        if entry is None:
            return None
        now = now or _utcnow()
        if now - _aware(entry.resolved_at) > RESOLVED_URL_EXPIRY:
            del self.resolved[name]
            return None
        return entry.url

    def set_resolved_url(self, name: str, url: str, *, now: datetime | None = None) -> None:
        self.resolved[name] = ResolvedEntry(url=url, resolved_at=now or _utcnow())

    # ── unresolvable memo ────────────────────────────────────────────────

    def is_unresolvable(self, name: str, *, now: datetime | None = None) -> bool:
        checked = self.unresolvable.get(name)
        if checked is None:
            return False
        now = now or _utcnow()
        if now - _aware(checked) > UNRESOLVABLE_EXPIRY:
            del self.unresolvable[name]
            return False
        return True

    def mark_unresolvable(self, name: str, *, now: datetime | None = None) -> None:
        self.unresolvable[name] = now or _utcnow()

    def clear_unresolvable(self, name: str) -> None:
        self.unresolvable.pop(name, None)
