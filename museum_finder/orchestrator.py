"""Pipeline orchestrator wiring filter, dispatcher, prober and sink."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from .config import PipelineConfig
from .engine import ArticleProber, Fetcher, Sink, TagClassifier, TaskDispatcher
from .engine.exporter import FileExporter
from .engine.probe_bag import renderer_for
from .engine.prober import FetchText


@dataclass(frozen=True, slots=True)
class PipelineOutcome:
    """Tally of one run, assembled after every unit has joined."""

    scanned: int
    admitted: int
    emitted: int
    failed: int
    dropped: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def summary_line(self) -> str:
        if self.failed == 0:
            return "No errors occurred while processing museums."
        return f"{self.failed} error/s occurred while processing museums."


class Orchestrator:
    """Central coordinator managing the lifecycle of one extraction run."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        fetch_text: FetchText | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._fetch_text = fetch_text
        self.logger = logger or structlog.get_logger("museum_finder").bind(component="orchestrator")

    def execute(
        self,
        records: Iterable[Any] | AsyncIterable[Any],
        output_path: Path | None = None,
    ) -> PipelineOutcome:
        """Blocking entry point: run the pipeline on a fresh event loop."""

        return asyncio.run(self._execute(records, output_path))

    async def _execute(
        self,
        records: Iterable[Any] | AsyncIterable[Any],
        output_path: Path | None,
    ) -> PipelineOutcome:
        executor = ThreadPoolExecutor(
            max_workers=self.config.concurrency.io_workers,
            thread_name_prefix="museum-finder",
        )
        asyncio.get_running_loop().set_default_executor(executor)
        return await self.run(records, output_path)

    async def run(
        self,
        records: Iterable[Any] | AsyncIterable[Any],
        output_path: Path | None = None,
    ) -> PipelineOutcome:
        config = self.config
        classifier = TagClassifier(config.keywords)
        path = Path(output_path or config.output_path)
        concurrency = config.concurrency

        sink = Sink(FileExporter(path), capacity=concurrency.sink_capacity)
        sink.start()

        fetcher: Fetcher | None = None
        fetch_text = self._fetch_text
        if fetch_text is None:
            fetcher = Fetcher(config.http)
            fetch_text = fetcher.fetch_text

        dispatcher = TaskDispatcher(
            classifier,
            ArticleProber(fetch_text, classifier, max_fetches=concurrency.max_fetches_per_unit),
            sink,
            render=renderer_for(config.output_format),
            max_units=concurrency.max_units,
        )
        self.logger.info(
            "pipeline_started",
            output=str(path),
            max_units=concurrency.max_units,
            max_fetches=concurrency.max_fetches_per_unit,
        )
        try:
            stats = await dispatcher.run(records)
        finally:
            await sink.close()
            try:
                await sink.wait()
            finally:
                if fetcher is not None:
                    await fetcher.close()

        outcome = PipelineOutcome(
            scanned=stats.scanned,
            admitted=stats.admitted,
            emitted=stats.emitted,
            failed=stats.failed,
            dropped=sink.dropped,
        )
        self.logger.info(
            "pipeline_finished",
            scanned=outcome.scanned,
            admitted=outcome.admitted,
            emitted=outcome.emitted,
            failed=outcome.failed,
            dropped=outcome.dropped,
        )
        return outcome


__all__ = ["Orchestrator", "PipelineOutcome"]
