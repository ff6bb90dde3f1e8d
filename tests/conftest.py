"""Shared fixtures for pipeline tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Iterable

import pytest

from museum_finder.config import ConfigLocator, ConfigRepository, KeywordTables, PipelineConfig
from museum_finder.engine import TagClassifier
from museum_finder.sources import Record


class StubFetch:
    """Controllable async fetch: bodies, failures and optional release gates per URL."""

    def __init__(
        self,
        bodies: dict[str, str | Exception] | None = None,
        gates: dict[str, asyncio.Event] | None = None,
    ) -> None:
        self.bodies = dict(bodies or {})
        self.gates = dict(gates or {})
        self.calls: list[str] = []
        self.completed: list[str] = []
        self.cancelled: list[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        try:
            gate = self.gates.get(url)
            if gate is not None:
                await gate.wait()
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        body = self.bodies.get(url, "")
        if isinstance(body, Exception):
            raise body
        self.completed.append(url)
        return body


@pytest.fixture
def classifier() -> TagClassifier:
    return TagClassifier(KeywordTables())


@pytest.fixture
def make_record() -> Callable[..., Record]:
    def _builder(tags: dict[str, str] | Iterable[tuple[str, str]]) -> Record:
        if isinstance(tags, dict):
            return Record.from_mapping(tags)
        return Record(tuple(tags))

    return _builder


@pytest.fixture
def stub_fetch() -> Callable[..., StubFetch]:
    return StubFetch


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(output_path=tmp_path / "museums.txt")


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    monkeypatch.setenv("MUSEUM_FINDER_HOME", str(tmp_path))
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
