"""Classification of admitted tags into identity, location and probe candidates."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, Iterable

from .predicates import TagClassifier
from .record_filter import Tag

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t", "\0": "\\0"}


@dataclass(frozen=True, slots=True)
class ProbeBag:
    """Classified fields of one admitted record."""

    identity: tuple[str, ...] = ()
    location: tuple[str, ...] = ()
    candidates: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.identity) + len(self.location) + len(self.candidates)

    def to_text(self) -> str:
        return (
            f"Name: {_debug_list(self.identity)}\n"
            f"Adresse: {_debug_list(self.location)}\n"
            f"Anderes: {_debug_list(self.candidates)}\n\n"
        )

    def to_json(self) -> str:
        payload = {
            "name": list(self.identity),
            "address": list(self.location),
            "other": list(self.candidates),
        }
        return json.dumps(payload, ensure_ascii=False) + "\n"


def classify(tags: Iterable[Tag], classifier: TagClassifier) -> ProbeBag:
    identity: list[str] = []
    location: list[str] = []
    candidates: list[str] = []
    for tag in tags:
        if classifier.is_name_key(tag.key):
            identity.append(tag.value)
        elif classifier.is_address_key(tag.key):
            location.append(tag.value)
        else:
            candidates.append(tag.value)
    return ProbeBag(tuple(identity), tuple(location), tuple(candidates))


def _quote(value: str) -> str:
    parts = []
    for ch in value:
        if ch in _ESCAPES:
            parts.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            parts.append(f"\\u{{{ord(ch):x}}}")
        else:
            parts.append(ch)
    return '"' + "".join(parts) + '"'


def _debug_list(values: Iterable[str]) -> str:
    return "[" + ", ".join(_quote(value) for value in values) + "]"


RENDERERS: dict[str, Callable[[ProbeBag], str]] = {
    "txt": ProbeBag.to_text,
    "jsonl": ProbeBag.to_json,
}


def renderer_for(fmt: str) -> Callable[[ProbeBag], str]:
    try:
        return RENDERERS[fmt]
    except KeyError:
        raise ValueError(f"Unsupported output format: {fmt}") from None


__all__ = ["ProbeBag", "RENDERERS", "classify", "renderer_for"]
