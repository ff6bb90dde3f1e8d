"""Single-writer sink fed through a bounded FIFO channel."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from .exporter import BaseExporter

DEFAULT_CAPACITY = 10_000


class SinkError(RuntimeError):
    """The output resource could not be opened, written, flushed or closed."""


class SinkClosedError(RuntimeError):
    """A payload was sent after shutdown or after the writer stopped."""


@dataclass(frozen=True, slots=True)
class Payload:
    text: str


@dataclass(frozen=True, slots=True)
class Shutdown:
    pass


SinkMessage = Payload | Shutdown


class Sink:
    """Own the exporter exclusively and write payloads in arrival order.

    Producers call :meth:`send`; the first :meth:`close` enqueues the single
    ``Shutdown`` message. Everything queued before ``Shutdown`` is written,
    everything queued behind it is discarded and counted in ``dropped``.
    """

    def __init__(
        self,
        exporter: BaseExporter,
        capacity: int = DEFAULT_CAPACITY,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._exporter = exporter
        self._queue: asyncio.Queue[SinkMessage] = asyncio.Queue(maxsize=capacity)
        self._task: asyncio.Task[None] | None = None
        self._closing = False
        self.written = 0
        self.dropped = 0
        self.logger = logger or structlog.get_logger("museum_finder.sink")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        if self._task is not None:
            raise RuntimeError("Sink already started")
        self._task = asyncio.create_task(self._run(), name="museum-finder-sink")
        return self._task

    async def send(self, text: str) -> None:
        if self._closing:
            raise SinkClosedError("sink is shutting down")
        await self._put(Payload(text))

    async def close(self) -> None:
        """Enqueue ``Shutdown`` once; later calls are no-ops."""

        if self._closing:
            return
        self._closing = True
        if not self.running:
            return
        try:
            await self._put(Shutdown())
        except SinkClosedError:
            # writer already gone; wait() reports why
            return

    async def wait(self) -> None:
        if self._task is None:
            raise RuntimeError("Sink was never started")
        await self._task

    async def _put(self, message: SinkMessage) -> None:
        if not self.running:
            raise SinkClosedError("sink is not running")
        try:
            self._queue.put_nowait(message)
            return
        except asyncio.QueueFull:
            pass
        put = asyncio.ensure_future(self._queue.put(message))
        try:
            done, _ = await asyncio.wait({put, self._task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not put.done():
                put.cancel()
        if put not in done:
            raise SinkClosedError("sink stopped while waiting for queue capacity")

    async def _run(self) -> None:
        self.logger.info("sink_started", path=str(getattr(self._exporter, "path", "")))
        try:
            await asyncio.to_thread(self._exporter.open)
            while True:
                message = await self._queue.get()
                if isinstance(message, Shutdown):
                    break
                await asyncio.to_thread(self._exporter.export, message.text)
                self.written += 1
            await asyncio.to_thread(self._exporter.flush)
        except Exception as exc:
            self.logger.error("sink_failed", error=str(exc))
            raise SinkError(f"Output resource failed: {exc}") from exc
        finally:
            self.dropped += await self._discard_pending()
            try:
                await self._release()
            finally:
                self.dropped += await self._discard_pending()
        self.logger.info("sink_stopped", written=self.written, dropped=self.dropped)

    async def _discard_pending(self) -> int:
        """Empty the queue, including puts from producers parked on a full queue.

        Each ``get_nowait`` wakes one parked producer whose message lands on the
        next loop iteration, so keep draining until a pass finds nothing.
        """

        discarded = 0
        while True:
            found = False
            while True:
                try:
                    message = self._queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                found = True
                if isinstance(message, Payload):
                    discarded += 1
            if not found:
                return discarded
            await asyncio.sleep(0)

    async def _release(self) -> None:
        try:
            await asyncio.to_thread(self._exporter.close)
        except Exception as exc:
            self.logger.error("sink_close_failed", error=str(exc))
            raise SinkError(f"Output resource failed to close: {exc}") from exc


__all__ = [
    "DEFAULT_CAPACITY",
    "Payload",
    "Shutdown",
    "Sink",
    "SinkClosedError",
    "SinkError",
    "SinkMessage",
]
