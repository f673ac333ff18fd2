# Cooperative scheduling for buildos.
# Tasks are asyncio coroutines on a single thread; they interleave only
# where they await suspend(). The scheduler, not the task, decides how
# long a suspended task waits before it polls again.

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Iterable, List, Optional

from buildos.config import get_settings


def in_task() -> bool:
    # Whether the caller runs inside a cooperative task.
    try:
        return asyncio.current_task() is not None
    except RuntimeError:
        return False


async def suspend(token: Any = None) -> None:
    # Yield to the scheduler. token identifies what the task waits on
    # (a Process for the executor); it is informational only.
    await asyncio.sleep(get_settings().poll_interval)


async def _limited(sem: Optional[asyncio.Semaphore], aw: Awaitable[Any]) -> Any:
    if sem is None:
        return await aw
    async with sem:
        return await aw


async def gather_tasks(tasks: Iterable[Awaitable[Any]], limit: Optional[int] = None) -> List[Any]:
    # Run tasks concurrently, at most limit at a time.
    # Results come back in submission order.
    sem = asyncio.Semaphore(limit) if limit and limit > 0 else None
    return list(await asyncio.gather(*(_limited(sem, t) for t in tasks)))


def run_tasks(tasks: Iterable[Awaitable[Any]], limit: Optional[int] = None) -> List[Any]:
    # Blocking entry point: start a scheduler and run tasks to completion.
    return asyncio.run(gather_tasks(tasks, limit))
