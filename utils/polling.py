"""
Timeouts expressed as a bounded number of polling rounds.

Both the pool qualification loop and the exit-signal loop poll something
every ``interval`` milliseconds for at most ``duration`` milliseconds. There
is no wall-clock deadline: the budget is ``max(1, duration // interval)``
rounds and the caller decides what exhausting it means.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Awaitable, Callable

Sleep = Callable[[float], Awaitable[None]]


class BoundedRounds:
    """Async iterator over round numbers ``1..rounds``.

    Sleeps ``interval`` between consecutive rounds, never after the last one
    and never after the consumer breaks out of the loop.
    """

    def __init__(self, interval_ms: int, duration_ms: int, sleep: Sleep = asyncio.sleep) -> None:
        self.interval_ms = int(interval_ms)
        self.duration_ms = int(duration_ms)
        self._sleep = sleep

    @property
    def disabled(self) -> bool:
        return self.interval_ms <= 0 or self.duration_ms <= 0

    @property
    def rounds(self) -> int:
        if self.disabled:
            return 0
        return max(1, self.duration_ms // self.interval_ms)

    async def __aiter__(self) -> AsyncIterator[int]:
        total = self.rounds
        for n in range(1, total + 1):
            yield n
            if n < total:
                await self._sleep(self.interval_ms / 1000)


async def sleep_ms(ms: int, sleep: Sleep = asyncio.sleep) -> None:
    if ms > 0:
        await sleep(ms / 1000)
