"""Cached, directional, wrap-around search over an ordered item list.

Match indices for a query are computed in one pass and cached per query
together with the list they came from; a cache hit requires the very same list
object. Callers clear the cache when a list is mutated in place.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

NOT_FOUND = -1


@runtime_checkable
class Searchable(Protocol):
    """Items that expose their own searchable label."""

    def search_text(self) -> str: ...


class SearchTest(Protocol):
    def __call__(self, item: Any, query: str, index: int) -> bool: ...


def item_text(item: Any) -> str:
    """Return the text a search query is matched against."""
    if isinstance(item, str):
        return item
    if isinstance(item, Searchable):
        return item.search_text()
    return str(item)


def substring_match(item: Any, query: str, index: int) -> bool:
    """Case-sensitive substring test, the default search predicate."""
    return query in item_text(item)


def ignore_case_match(item: Any, query: str, index: int) -> bool:
    return query.casefold() in item_text(item).casefold()


@dataclass(frozen=True)
class _CacheEntry:
    items: Sequence[Any]
    found: tuple[int, ...]


def _start_position(found: Sequence[int], start_index: int, direction: int) -> int:
    """Position in ``found`` that stepping ``direction`` away from lands on the next hit.

    Forward, this is the last hit at or before ``start_index``; backward, the
    first hit at or after it. Missing anchors fall off either end so the step
    wraps around.
    """
    position = len(found) - 1 if direction > 0 else 0
    for i, item_index in enumerate(found):
        if item_index >= start_index:
            position = i - 1 if (direction > 0 and item_index > start_index) else i
            break
    return position


class Searcher:
    """Search engine with a per-query match cache; one per navigation session."""

    def __init__(self) -> None:
        self._cache: dict[str, _CacheEntry] = {}

    def clear_cache(self, query: str | None = None) -> None:
        """Drop every cached query, or only ``query`` when given."""
        if query is None:
            self._cache.clear()
        else:
            self._cache.pop(query, None)

    def cached_matches(self, items: Sequence[Any], query: str) -> tuple[int, ...] | None:
        entry = self._cache.get(query)
        if entry is None or entry.items is not items:
            return None
        return entry.found

    def find_all(
        self,
        items: Sequence[Any],
        query: str,
        *,
        test: SearchTest | None = None,
        use_cache: bool = False,
    ) -> tuple[int, ...]:
        """Return the ordered indices of every item matching ``query``."""
        if use_cache:
            cached = self.cached_matches(items, query)
            if cached is not None:
                return cached

        test = test or substring_match
        found = tuple(index for index, item in enumerate(items) if test(item, query, index))
        logger.debug("search %r matched %d of %d items", query, len(found), len(items))
        if use_cache:
            self._cache[query] = _CacheEntry(items=items, found=found)
        return found

    def search(
        self,
        items: Sequence[Any],
        query: str,
        *,
        test: SearchTest | None = None,
        start_index: int = 0,
        count: int = 1,
        use_cache: bool = False,
    ) -> int:
        """Return the index of the ``count``-th match after ``start_index``.

        Negative ``count`` searches backward. Both directions skip the match at
        ``start_index`` itself and wrap around the ends of ``items``. Returns
        ``NOT_FOUND`` when nothing matches or ``count`` is zero.
        """
        if count == 0:
            return NOT_FOUND
        found = self.find_all(items, query, test=test, use_cache=use_cache)
        if not found:
            return NOT_FOUND
        position = _start_position(found, start_index, count)
        return found[(position + count) % len(found)]
