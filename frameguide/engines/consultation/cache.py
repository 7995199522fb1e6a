"""Content-addressed guidance cache — one ``<key>.md`` file per consultation."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

import structlog

from frameguide.core.fs import atomic_write_text

log = structlog.get_logger("frameguide.engine")

CACHE_SUFFIX = ".md"

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._@-]+")


def _safe(part: str) -> str:
    """Make *part* usable inside a single file name."""
    return _UNSAFE_RE.sub("_", part).strip("._") or "_"


def _digest(*fields: str) -> str:
    return hashlib.sha256("\x00".join(fields).encode("utf-8")).digest()[:8].hex()


def consult_cache_key(unit_id: str, framework: str, commit: str, description: str) -> str:
    """Key for a unit-level consultation; any changed input yields a new key."""
    digest = _digest(unit_id, framework, commit, description)
    return f"{_safe(unit_id)}-{_safe(framework)}-{digest}"


def feature_consult_cache_key(feature: str, framework: str, commit: str) -> str:
    digest = _digest(feature, framework, commit)
    return f"feature-{_safe(feature)}-{_safe(framework)}-{digest}"


class GuidanceCache:
    """Raw guidance text stored under *directory*, named by cache key."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}{CACHE_SUFFIX}"

    def load(self, key: str) -> str | None:
        """Stored guidance for *key*; a missing or unreadable file is a miss."""
        try:
            return self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("consult.cache_unreadable", key=key, error=str(exc))
            return None

    def store(self, key: str, guidance: str) -> None:
        atomic_write_text(self.path_for(key), guidance)
