"""Concurrent keyword probing of a record's candidate URLs."""

from __future__ import annotations

from functools import partial
from typing import Awaitable, Callable, Sequence

import structlog

from .predicates import TagClassifier
from .race import race_until

FetchText = Callable[[str], Awaitable[str]]


class ArticleProber:
    """Fetch every candidate concurrently and stop at the first keyword hit."""

    def __init__(
        self,
        fetch_text: FetchText,
        classifier: TagClassifier,
        max_fetches: int | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._fetch_text = fetch_text
        self._classifier = classifier
        self._max_fetches = max_fetches
        self.logger = logger or structlog.get_logger("museum_finder.prober")

    async def _fetch(self, url: str) -> str:
        try:
            return await self._fetch_text(url)
        except Exception as exc:
            self.logger.debug("fetch_failed", url=url, error=str(exc))
            raise

    async def probe(self, candidates: Sequence[str]) -> bool:
        if not candidates:
            return False
        winner = await race_until(
            [partial(self._fetch, url) for url in candidates],
            self._classifier.contains_keyword,
            limit=self._max_fetches,
        )
        matched = winner is not None
        self.logger.debug("probe_finished", candidates=len(candidates), matched=matched)
        return matched


__all__ = ["ArticleProber", "FetchText"]
