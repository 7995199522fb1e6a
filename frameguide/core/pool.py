"""Bounded fan-out / fan-in over a fixed list of work items."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def fan_out(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    width: int,
) -> list[R]:
    """Run *worker* over *items* with at most *width* in flight.

    Items go through a bounded queue drained by a fixed pool of worker
    tasks. Every result lands in one collector, indexed by input position,
    which is returned only after all workers have joined. *worker* is
    expected to contain its own per-item failures; an exception escaping
    it cancels the remaining workers and propagates.
    """
    if not items:
        return []

    queue: asyncio.Queue[tuple[int, T]] = asyncio.Queue(maxsize=len(items))
    for index, item in enumerate(items):
        queue.put_nowait((index, item))

    collected: list[R | None] = [None] * len(items)

    async def _drain() -> None:
        while True:
            try:
                index, item = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                collected[index] = await worker(item)
            finally:
                queue.task_done()

    tasks = [asyncio.create_task(_drain()) for _ in range(max(1, min(width, len(items))))]
    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
    return collected  # type: ignore[return-value]
