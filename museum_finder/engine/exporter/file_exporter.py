"""Append-only UTF-8 text file exporter."""

from __future__ import annotations

from pathlib import Path

from .base import BaseExporter


class FileExporter(BaseExporter):
    """Append blocks to a local file, creating it when absent.

    The file is opened lazily on the first write or flush so that
    constructing an exporter never touches the filesystem.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._file = None

    def open(self) -> None:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("a", encoding="utf-8", newline="")

    def export(self, block: str) -> None:
        self.open()
        self._file.write(block)

    def flush(self) -> None:
        self.open()
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


__all__ = ["FileExporter"]
