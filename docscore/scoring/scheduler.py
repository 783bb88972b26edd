# docscore/scoring/scheduler.py

from __future__ import annotations

import asyncio


class Scheduler:
    """
    Timer used for retry backoff and inter-document pacing.

    The scorers never call asyncio.sleep directly; tests swap in a scheduler
    that records the requested waits and returns immediately.
    """

    async def sleep(self, seconds: float) -> None:
        raise NotImplementedError


class AsyncioScheduler(Scheduler):
    async def sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)
