"""Lock-file reader registry — per-ecosystem readers in priority order."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class LockfileReader(Protocol):
    """Interface that every lock-file reader must satisfy."""

    ecosystem: str
    filename: str
    priority: int  # lower runs first

    def parse(self, content: str) -> dict[str, str]: ...


READER_REGISTRY: dict[str, list[LockfileReader]] = {}


def register_reader(reader: LockfileReader) -> None:
    """Register a reader instance under its ecosystem, keeping priority order."""
    readers = READER_REGISTRY.setdefault(reader.ecosystem, [])
    readers.append(reader)
    readers.sort(key=lambda r: r.priority)


def read_lockfile(reader: LockfileReader, project_root: Path) -> dict[str, str] | None:
    """Read and parse *reader*'s lock file under *project_root*.

    Returns ``None`` when the file does not exist or cannot be read.
    """
    path = project_root / reader.filename
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return reader.parse(content)


def read_lock_versions(ecosystem: str, project_root: Path) -> tuple[str, dict[str, str]] | None:
    """Return ``(filename, versions)`` from the first lock file that yields entries.

    Readers are tried in priority order; formats are never merged.
    """
    for reader in READER_REGISTRY.get(ecosystem, []):
        versions = read_lockfile(reader, project_root)
        if versions:
            return reader.filename, versions
    return None
