from __future__ import annotations

import asyncio

import pytest

from museum_finder.engine import ArticleProber, Sink, TagClassifier, TaskDispatcher
from museum_finder.engine.exporter import BaseExporter
from museum_finder.sources import Record


class MemoryExporter(BaseExporter):
    def __init__(self) -> None:
        self.blocks: list[str] = []

    def export(self, block: str) -> None:
        self.blocks.append(block)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


def museum(index: int, link: str | None = None) -> Record:
    tags = {"tourism": "museum", "name": f"museum {index}"}
    if link is not None:
        tags["website"] = link
    return Record.from_mapping(tags)


async def _dispatch(dispatcher: TaskDispatcher, sink: Sink, records):
    sink.start()
    try:
        return await dispatcher.run(records)
    finally:
        await sink.close()
        await sink.wait()


@pytest.mark.asyncio
async def test_dispatcher_counts_and_emits(classifier: TagClassifier, stub_fetch) -> None:
    fetch = stub_fetch(
        {
            "http://art.example.com": "contemporary art",
            "http://shop.example.com": "gift shop hours",
        }
    )
    exporter = MemoryExporter()
    sink = Sink(exporter)
    dispatcher = TaskDispatcher(classifier, ArticleProber(fetch, classifier), sink)
    records = [
        museum(1, "http://art.example.com"),
        museum(2, "http://shop.example.com"),
        museum(3),
        Record.from_mapping({"amenity": "cafe", "website": "http://cafe.example.com"}),
    ]

    stats = await _dispatch(dispatcher, sink, records)

    assert (stats.scanned, stats.admitted, stats.emitted, stats.failed) == (4, 2, 1, 0)
    assert exporter.blocks == [
        'Name: ["museum 1"]\nAdresse: []\nAnderes: ["http://art.example.com"]\n\n'
    ]
    assert "http://cafe.example.com" not in fetch.calls


@pytest.mark.asyncio
async def test_failing_unit_does_not_affect_siblings(
    classifier: TagClassifier, stub_fetch, monkeypatch: pytest.MonkeyPatch
) -> None:
    fetch = stub_fetch({f"http://{i}.example.com": "art" for i in range(5)})
    exporter = MemoryExporter()
    sink = Sink(exporter)
    prober = ArticleProber(fetch, classifier)
    dispatcher = TaskDispatcher(classifier, prober, sink)

    original = prober.probe

    async def flaky(candidates):
        if candidates == ("http://2.example.com",):
            raise RuntimeError("unit blew up")
        return await original(candidates)

    monkeypatch.setattr(prober, "probe", flaky)

    stats = await _dispatch(
        dispatcher, sink, [museum(i, f"http://{i}.example.com") for i in range(5)]
    )

    assert stats.failed == 1
    assert stats.emitted == 4
    assert len(exporter.blocks) == 4


@pytest.mark.asyncio
async def test_max_units_bounds_in_flight_work(classifier: TagClassifier, stub_fetch) -> None:
    gate = asyncio.Event()
    urls = [f"http://{i}.example.com" for i in range(6)]
    fetch = stub_fetch({url: "art" for url in urls}, gates={url: gate for url in urls})
    sink = Sink(MemoryExporter())
    dispatcher = TaskDispatcher(classifier, ArticleProber(fetch, classifier), sink, max_units=2)

    task = asyncio.create_task(_dispatch(dispatcher, sink, [museum(i, url) for i, url in enumerate(urls)]))
    await asyncio.sleep(0.01)
    assert len(fetch.calls) == 2

    gate.set()
    stats = await task
    assert stats.emitted == 6
    assert len(fetch.calls) == 6


@pytest.mark.asyncio
async def test_dispatcher_accepts_async_iterables(classifier: TagClassifier, stub_fetch) -> None:
    fetch = stub_fetch({"http://a.example.com": "kunst"})
    exporter = MemoryExporter()
    sink = Sink(exporter)
    dispatcher = TaskDispatcher(classifier, ArticleProber(fetch, classifier), sink)

    async def stream():
        yield museum(1, "http://a.example.com")
        yield museum(2)

    stats = await _dispatch(dispatcher, sink, stream())
    assert stats.scanned == 2
    assert stats.emitted == 1


@pytest.mark.asyncio
async def test_dispatcher_stops_reading_when_sink_is_gone(classifier: TagClassifier, stub_fetch) -> None:
    sink = Sink(MemoryExporter())
    dispatcher = TaskDispatcher(classifier, ArticleProber(stub_fetch(), classifier), sink)
    sink.start()
    await sink.close()
    await sink.wait()

    stats = await dispatcher.run([museum(1, "http://a.example.com")])
    assert stats.scanned == 0


def test_dispatcher_rejects_zero_units(classifier: TagClassifier, stub_fetch) -> None:
    with pytest.raises(ValueError):
        TaskDispatcher(classifier, ArticleProber(stub_fetch(), classifier), Sink(MemoryExporter()), max_units=0)
