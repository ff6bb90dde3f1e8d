from __future__ import annotations

from pathlib import Path

import pytest

from museum_finder.sources import JsonLinesReader, PbfReader, Record, open_reader


def test_jsonl_reader_accepts_both_shapes(tmp_path: Path) -> None:
    path = tmp_path / "records.jsonl"
    path.write_text(
        '{"tags": {"tourism": "museum", "name": "A"}}\n'
        "\n"
        '{"name": "B", "website": "http://b.example.com"}\n',
        encoding="utf-8",
    )
    records = list(JsonLinesReader(path))
    assert records == [
        Record((("tourism", "museum"), ("name", "A"))),
        Record((("name", "B"), ("website", "http://b.example.com"))),
    ]


def test_jsonl_reader_skips_malformed_lines(tmp_path: Path) -> None:
    path = tmp_path / "records.ndjson"
    path.write_text(
        "not json\n"
        "[1, 2]\n"
        '{"tags": {"height": 12}}\n'
        '{"tags": "museum"}\n'
        '{"name": "kept"}\n',
        encoding="utf-8",
    )
    reader = JsonLinesReader(path)
    assert [record.tags for record in reader] == [(("name", "kept"),)]
    assert reader.skipped == 4


def test_open_reader_dispatches_on_suffix(tmp_path: Path) -> None:
    jsonl = tmp_path / "a.jsonl"
    jsonl.write_text("", encoding="utf-8")
    pbf = tmp_path / "region.osm.pbf"
    pbf.write_bytes(b"")
    assert isinstance(open_reader(jsonl), JsonLinesReader)
    assert isinstance(open_reader(pbf), PbfReader)


def test_open_reader_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        open_reader(tmp_path / "missing.jsonl")
    csv = tmp_path / "data.csv"
    csv.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        open_reader(csv)


def test_jsonl_reader_skips_undecodable_lines(tmp_path: Path) -> None:
    path = tmp_path / "records.jsonl"
    path.write_bytes(
        b'{"name": "first", "tourism": "museum"}\n'
        b'{"name": "bad \xff\xfe byte"}\n'
        b'{"name": "m\xc3\xbcnchen"}\n'
    )
    reader = JsonLinesReader(path)
    records = list(reader)
    assert [dict(record.tags)["name"] for record in records] == ["first", "münchen"]
    assert reader.skipped == 1
