"""Dataset readers."""

from .readers import JsonLinesReader, PbfReader, Record, open_reader

__all__ = ["JsonLinesReader", "PbfReader", "Record", "open_reader"]
