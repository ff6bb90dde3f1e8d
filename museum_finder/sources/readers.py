"""Sequential readers producing tagged records from dataset files."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import structlog

logger = structlog.get_logger("museum_finder.sources")

JSONL_SUFFIXES = (".jsonl", ".ndjson")
PBF_SUFFIXES = (".pbf",)


@dataclass(frozen=True, slots=True)
class Record:
    """One dataset entity with its ``(key, value)`` tag pairs."""

    tags: tuple[tuple[str, str], ...]

    @classmethod
    def from_mapping(cls, tags: Mapping[str, str]) -> "Record":
        return cls(tuple(tags.items()))


class JsonLinesReader:
    """Read one JSON object per line: ``{"tags": {...}}`` or a flat string map.

    Lines that are not valid UTF-8 JSON or whose tags are not string pairs are
    skipped.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.skipped = 0

    def __iter__(self) -> Iterator[Record]:
        with self.path.open("rb") as stream:
            for line_no, line in enumerate(stream, start=1):
                line = line.strip()
                if not line:
                    continue
                record = self._parse(line)
                if record is None:
                    self.skipped += 1
                    logger.debug("record_skipped", path=str(self.path), line=line_no)
                    continue
                yield record

    @staticmethod
    def _parse(line: bytes) -> Record | None:
        try:
            payload = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return None
        if not isinstance(payload, dict):
            return None
        tags = payload.get("tags", payload)
        if not isinstance(tags, dict):
            return None
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in tags.items()):
            return None
        return Record.from_mapping(tags)


class PbfReader:
    """Stream tagged nodes, ways and relations from an OpenStreetMap PBF file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __iter__(self) -> Iterator[Record]:
        try:
            import osmium
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError(
                "PBF support requires installing the 'osmium' package (pip install museum-finder[pbf])."
            ) from exc

        for obj in osmium.FileProcessor(str(self.path)):
            if len(obj.tags) == 0:
                continue
            yield Record(tuple((tag.k, tag.v) for tag in obj.tags))


def open_reader(path: Path) -> JsonLinesReader | PbfReader:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input dataset not found: {path}")
    suffix = path.suffix.lower()
    if suffix in PBF_SUFFIXES:
        return PbfReader(path)
    if suffix in JSONL_SUFFIXES:
        return JsonLinesReader(path)
    raise ValueError(f"Unsupported input format: {path.suffix or path.name}")


__all__ = ["JsonLinesReader", "PbfReader", "Record", "open_reader"]
