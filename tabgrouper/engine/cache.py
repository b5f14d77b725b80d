"""Two-tier classification cache.

Tiers:
  - by URL:    every classification result, including NO_MATCH, keyed by the
               full URL. Serves repeat events for the same resource.
  - by domain: auto-pattern matches only, keyed by domain. Serves bulk runs in
               which many resources share a domain.

Entries never expire on their own. ``invalidate_all()`` clears both tiers and
advances a generation counter; every entry is stamped with the generation it
was written under and is ignored once the generation moves on, so a result
computed against an older pattern set is never served even if the clear and
a write were to interleave.

Both tiers are unbounded. The key space is bounded in practice by the URLs a
user has open between configuration changes.
"""

from __future__ import annotations

from typing import Optional

from tabgrouper.models.classification import ClassificationResult, Matched, MatchSource
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


class ClassificationCache:
    """URL and domain memo for classification results.

    ``lookup_*`` return None when nothing is cached; a cached negative result
    is returned as ``NO_MATCH``, never as None.
    """

    def __init__(self) -> None:
        self._generation: int = 0
        self._by_url: dict[str, tuple[int, ClassificationResult]] = {}
        self._by_domain: dict[str, tuple[int, ClassificationResult]] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        return len(self._by_url) + len(self._by_domain)

    def _fresh(self, entry: Optional[tuple[int, ClassificationResult]]) -> Optional[ClassificationResult]:
        if entry is None:
            return None
        generation, result = entry
        if generation != self._generation:
            return None
        return result

    def lookup_by_url(self, url: str) -> Optional[ClassificationResult]:
        return self._fresh(self._by_url.get(url))

    def lookup_by_domain(self, domain: str) -> Optional[ClassificationResult]:
        return self._fresh(self._by_domain.get(domain))

    def store(self, url: Optional[str], domain: Optional[str], result: ClassificationResult) -> None:
        """Record ``result`` for ``url``, and for ``domain`` when it is an auto-pattern match."""
        if url:
            self._by_url[url] = (self._generation, result)
        if (
            domain
            and isinstance(result, Matched)
            and result.source is MatchSource.AUTO
        ):
            self._by_domain[domain] = (self._generation, result)

    def invalidate_all(self) -> None:
        """Drop every entry in both tiers."""
        dropped = len(self)
        self._by_url.clear()
        self._by_domain.clear()
        self._generation += 1
        logger.debug(
            "Classification cache invalidated",
            dropped=dropped,
            generation=self._generation,
        )
