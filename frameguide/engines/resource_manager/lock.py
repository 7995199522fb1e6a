"""Advisory per-checkout lock — one ``<checkout>.lock`` file per cache key."""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path

import structlog

from frameguide.exceptions import CheckoutLockTimeout

log = structlog.get_logger("frameguide.engine")

LOCK_POLL_INTERVAL = 0.25  # seconds
LOCK_WAIT_TIMEOUT = 300.0  # a cold clone of a large repo can be slow
LOCK_STALE_AFTER = 3600.0


def _pid_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    except OSError:
        return False
    return True


class CheckoutLock:
    """Async context manager guarding one checkout directory.

    The lock file is created with ``O_CREAT | O_EXCL`` and records the
    holder's PID. A waiter polls until the file disappears; a lock whose
    holder is dead, or which is older than *stale_after*, is broken.
    """

    def __init__(
        self,
        checkout: Path,
        *,
        timeout: float = LOCK_WAIT_TIMEOUT,
        stale_after: float = LOCK_STALE_AFTER,
        poll_interval: float = LOCK_POLL_INTERVAL,
    ) -> None:
        self.path = checkout.with_name(checkout.name + ".lock")
        self.timeout = timeout
        self.stale_after = stale_after
        self.poll_interval = poll_interval
        self._held = False

    def try_acquire(self) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"pid": os.getpid(), "started_at": time.time()}, f)
        self._held = True
        return True

    def is_stale(self) -> bool:
        try:
            info = json.loads(self.path.read_text(encoding="utf-8"))
            pid = int(info["pid"])
            started_at = float(info["started_at"])
        except FileNotFoundError:
            return False
        except (OSError, ValueError, KeyError, TypeError):
            # Unreadable or half-written; fall back to file age.
            try:
                started_at = self.path.stat().st_mtime
            except FileNotFoundError:
                return False
            return time.time() - started_at > self.stale_after
        if not _pid_alive(pid):
            return True
        return time.time() - started_at > self.stale_after

    async def acquire(self) -> None:
        deadline = time.monotonic() + self.timeout
        while not self.try_acquire():
            if self.is_stale():
                log.warning("lock.stale_removed", path=str(self.path))
                self.path.unlink(missing_ok=True)
                continue
            if time.monotonic() >= deadline:
                raise CheckoutLockTimeout(f"timed out waiting for {self.path}")
            await asyncio.sleep(self.poll_interval)

    def release(self) -> None:
        if self._held:
            self.path.unlink(missing_ok=True)
            self._held = False

    async def __aenter__(self) -> CheckoutLock:
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.release()
