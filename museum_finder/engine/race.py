"""First-match-wins fan-out over a set of coroutine factories."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")


async def race_until(
    factories: Iterable[Callable[[], Awaitable[T]]],
    predicate: Callable[[T], bool],
    *,
    limit: int | None = None,
) -> T | None:
    """Run every factory concurrently and return the first result satisfying ``predicate``.

    Results are consumed in completion order. Children that raise are ignored.
    When a result wins, every still-pending child is cancelled and awaited
    before returning, so no sibling completes after the winner is reported.
    Returns ``None`` when all children finish without a satisfying result.

    ``limit`` caps how many children run at once; ``None`` starts them all.
    """

    semaphore = asyncio.Semaphore(limit) if limit else None

    async def _guarded(factory: Callable[[], Awaitable[T]]) -> T:
        if semaphore is None:
            return await factory()
        async with semaphore:
            return await factory()

    pending: set[asyncio.Task[T]] = {asyncio.ensure_future(_guarded(f)) for f in factories}
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task.cancelled():
                    continue
                if task.exception() is not None:
                    continue
                result = task.result()
                if predicate(result):
                    return result
        return None
    finally:
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)


__all__ = ["race_until"]
