"""Admission predicate and tag projection for a single record."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .predicates import TagClassifier


@dataclass(frozen=True, slots=True)
class Tag:
    """Lower-cased tag that survived admission."""

    key: str
    value: str


def tag_pairs(tags: Mapping[str, str] | Iterable[tuple[str, str]]) -> Iterable[tuple[str, str]]:
    if isinstance(tags, Mapping):
        return tags.items()
    return tags


def admit(record: Any, classifier: TagClassifier) -> list[Tag] | None:
    """Return the projected tags of ``record`` or ``None`` when it is rejected.

    A record is admitted when one tag value names the category and one tag
    value looks like a link. Kept tags are those with a name, address,
    contact or link-like key, or a link-like value, in original order.
    """

    pairs = list(tag_pairs(record.tags))
    if not any(classifier.is_category(value) for _, value in pairs):
        return None
    if not any(classifier.is_link(value) for _, value in pairs):
        return None

    kept: list[Tag] = []
    for raw_key, raw_value in pairs:
        key = raw_key.lower()
        value = raw_value.lower()
        if (
            classifier.is_name_key(key)
            or classifier.is_address_key(key)
            or classifier.is_contact_key(key)
            or classifier.is_link(key)
            or classifier.is_link(value)
        ):
            kept.append(Tag(key=key, value=value))
    return kept


__all__ = ["Tag", "admit", "tag_pairs"]
