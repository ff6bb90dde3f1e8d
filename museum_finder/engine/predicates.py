"""Stateless string classification driven by keyword tables."""

from __future__ import annotations

from ..config import KeywordTables


class TagClassifier:
    """Answer category, link and key-kind questions about tag strings.

    All checks are case-insensitive. Word tables are copied into tuples and a
    frozenset at construction, so an instance can be shared freely between
    concurrent units.
    """

    def __init__(self, tables: KeywordTables | None = None) -> None:
        tables = tables or KeywordTables()
        self._category = tuple(tables.category)
        self._link_markers = tuple(tables.link_markers)
        self._link_exclusions = tuple(tables.link_exclusions)
        self._name_keys = tuple(tables.name_keys)
        self._address_keys = tuple(tables.address_keys)
        self._contact_keys = tuple(tables.contact_keys)
        self._article_keywords = frozenset(tables.article_keywords)

    @staticmethod
    def _contains_any(text: str, needles: tuple[str, ...]) -> bool:
        lowered = text.lower()
        return any(needle in lowered for needle in needles)

    def is_category(self, value: str) -> bool:
        return self._contains_any(value, self._category)

    def is_link(self, value: str) -> bool:
        """Substring match against URL markers; e-mail addresses never count."""

        if self._contains_any(value, self._link_exclusions):
            return False
        return self._contains_any(value, self._link_markers)

    def is_name_key(self, key: str) -> bool:
        return self._contains_any(key, self._name_keys)

    def is_address_key(self, key: str) -> bool:
        return self._contains_any(key, self._address_keys)

    def is_contact_key(self, key: str) -> bool:
        return self._contains_any(key, self._contact_keys)

    def contains_keyword(self, text: str) -> bool:
        """Whole-token match: ``"arts"`` never satisfies keyword ``"art"``."""

        return any(token in self._article_keywords for token in text.lower().split())


__all__ = ["TagClassifier"]
