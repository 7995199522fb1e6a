"""Repository sync capability — shallow git checkouts of framework sources."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from frameguide.exceptions import RepositorySyncError

log = structlog.get_logger("frameguide.engine")


@runtime_checkable
class RepositorySync(Protocol):
    """Opaque capability the manager uses to create and refresh checkouts."""

    def exists(self, path: Path) -> bool: ...

    async def clone(self, url: str, path: Path, ref: str | None = None) -> None: ...

    async def is_stale(self, url: str, path: Path) -> bool: ...

    async def update(self, path: Path) -> None: ...

    async def find_tag(self, url: str, version: str) -> str | None: ...

    async def head_commit(self, path: Path) -> str: ...


def find_version_tag(ls_remote_output: str, version: str) -> str | None:
    """Pick the tag matching *version* from ``git ls-remote --tags`` output.

    Tries ``v<version>``, then ``<version>``, then the first tag ending in
    ``@<version>`` (monorepo convention). Peeled ``^{}`` refs are ignored.
    """
    if not version:
        return None

    tags: list[str] = []
    for line in ls_remote_output.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        ref = fields[1]
        if ref.endswith("^{}"):
            continue
        tags.append(ref.removeprefix("refs/tags/"))

    for candidate in (f"v{version}", version):
        if candidate in tags:
            return candidate

    suffix = f"@{version}"
    for tag in tags:
        if tag.endswith(suffix):
            return tag
    return None


class GitRepositorySync:
    """``RepositorySync`` backed by ``git`` subprocesses."""

    def exists(self, path: Path) -> bool:
        return (path / ".git").exists()

    async def clone(self, url: str, path: Path, ref: str | None = None) -> None:
        """Shallow single-branch clone of *url* into *path*.

        *ref* is a tag or branch name; ``None`` clones the default branch.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        cmd = ["git", "clone", "--depth", "1", "--single-branch"]
        if ref:
            cmd += ["--branch", ref]
        cmd += ["--", url, str(path)]
        await _run(cmd)

    async def is_stale(self, url: str, path: Path) -> bool:
        """True when the remote default branch moved past the local HEAD."""
        local = await self.head_commit(path)
        out = await _run(["git", "ls-remote", url, "HEAD"])
        fields = out.split()
        if not fields:
            raise RepositorySyncError(f"git ls-remote returned no HEAD for {url}")
        return fields[0] != local

    async def update(self, path: Path) -> None:
        await _run(["git", "-C", str(path), "fetch", "--depth", "1", "origin", "HEAD"])
        await _run(["git", "-C", str(path), "reset", "--hard", "FETCH_HEAD"])

    async def find_tag(self, url: str, version: str) -> str | None:
        if not version:
            return None
        try:
            out = await _run(["git", "ls-remote", "--tags", url])
        except RepositorySyncError as exc:
            log.debug("repo.tag_lookup_failed", url=url, error=str(exc))
            return None
        return find_version_tag(out, version)

    async def head_commit(self, path: Path) -> str:
        out = await _run(["git", "-C", str(path), "rev-parse", "HEAD"])
        return out.strip()


async def _run(cmd: list[str]) -> str:
    """Run a git command and return stdout, raising RepositorySyncError on failure."""
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=env,
        )
    except OSError as exc:
        raise RepositorySyncError(f"cannot run {cmd[0]}: {exc}") from exc
    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise RepositorySyncError(
            f"git command failed (exit {proc.returncode}): {stderr.decode(errors='replace').strip()}"
        )
    return stdout.decode(errors="replace")
