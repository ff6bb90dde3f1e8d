"""Bounded dispatch of one pipeline unit per admitted record."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass
from typing import Any, Callable

import structlog

from .predicates import TagClassifier
from .probe_bag import ProbeBag, classify
from .prober import ArticleProber
from .record_filter import Tag, admit
from .sink import Sink

# Sync readers give the event loop a turn after this many records
_YIELD_EVERY = 512


@dataclass(slots=True)
class DispatchStats:
    scanned: int = 0
    admitted: int = 0
    emitted: int = 0
    failed: int = 0


async def _iterate(records: Iterable[Any] | AsyncIterable[Any]) -> AsyncIterator[Any]:
    if isinstance(records, AsyncIterable):
        async for record in records:
            yield record
        return
    for index, record in enumerate(records, start=1):
        yield record
        if index % _YIELD_EVERY == 0:
            await asyncio.sleep(0)


class TaskDispatcher:
    """Filter the record stream and run admitted records as independent units.

    At most ``max_units`` units are in flight. A unit that raises is counted as
    failed at join time and never affects its siblings or the stream loop.
    """

    def __init__(
        self,
        classifier: TagClassifier,
        prober: ArticleProber,
        sink: Sink,
        render: Callable[[ProbeBag], str] = ProbeBag.to_text,
        max_units: int = 256,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if max_units < 1:
            raise ValueError("max_units must be >= 1")
        self._classifier = classifier
        self._prober = prober
        self._sink = sink
        self._render = render
        self.max_units = max_units
        self.logger = logger or structlog.get_logger("museum_finder.dispatcher")

    async def run(self, records: Iterable[Any] | AsyncIterable[Any]) -> DispatchStats:
        stats = DispatchStats()
        in_flight: set[asyncio.Task[bool]] = set()
        try:
            async for record in _iterate(records):
                if not self._sink.running:
                    self.logger.error("sink_unavailable", scanned=stats.scanned)
                    break
                stats.scanned += 1
                tags = admit(record, self._classifier)
                del record
                if tags is None:
                    continue
                stats.admitted += 1
                if len(in_flight) >= self.max_units:
                    done, in_flight = await asyncio.wait(
                        in_flight, return_when=asyncio.FIRST_COMPLETED
                    )
                    self._reap(done, stats)
                in_flight.add(asyncio.create_task(self._run_unit(tags)))
        except BaseException:
            for task in in_flight:
                task.cancel()
            raise
        finally:
            if in_flight:
                done, _ = await asyncio.wait(in_flight)
                self._reap(done, stats)
        self.logger.info(
            "dispatch_finished",
            scanned=stats.scanned,
            admitted=stats.admitted,
            emitted=stats.emitted,
            failed=stats.failed,
        )
        return stats

    async def _run_unit(self, tags: list[Tag]) -> bool:
        bag = classify(tags, self._classifier)
        if not await self._prober.probe(bag.candidates):
            return False
        await self._sink.send(self._render(bag))
        self.logger.debug("record_emitted", candidates=len(bag.candidates))
        return True

    def _reap(self, done: set[asyncio.Task[bool]], stats: DispatchStats) -> None:
        for task in done:
            if task.cancelled():
                stats.failed += 1
                self.logger.warning("unit_failed", error="cancelled")
                continue
            error = task.exception()
            if error is not None:
                stats.failed += 1
                self.logger.warning("unit_failed", error=f"{type(error).__name__}: {error}")
            elif task.result():
                stats.emitted += 1


__all__ = ["DispatchStats", "TaskDispatcher"]
