"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseExporter(ABC):
    """Append-only output contract owned by exactly one sink task."""

    def open(self) -> None:
        """Acquire the destination eagerly; optional."""

    @abstractmethod
    def export(self, block: str) -> None:
        """Append one serialized block."""

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["BaseExporter"]
