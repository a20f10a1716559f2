"""
Recent-search history, trending terms and keyboard navigation over both.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any

from pydantic import ValidationError

from .models import BusinessType, SearchHistoryEntry
from .storage import KeyValueStore

HISTORY_KEY = "search-history"
TRENDING_KEY = "trending-searches"
RECENT_SEARCHES_KEY = "recent_searches"

MAX_HISTORY = 10
MAX_RECENT = 5
MERGED_HISTORY = 5
MERGED_TRENDING = 5

_POPULAR_SEARCHES: dict[str, tuple[str, ...]] = {
    "pharmacy": (
        "headache medicine",
        "fever tablets",
        "cough syrup",
        "diabetes medicine",
        "blood pressure",
        "vitamins",
        "pain relief",
        "antibiotics",
    ),
    "grocery": (
        "rice",
        "cooking oil",
        "vegetables",
        "fruits",
        "dairy products",
        "snacks",
        "beverages",
        "spices",
    ),
    "general": (
        "electronics",
        "clothing",
        "home appliances",
        "books",
        "beauty products",
        "sports equipment",
    ),
}


def popular_searches(business_type: BusinessType) -> list[str]:
    """Starter search terms for a storefront of the given type."""
    return list(_POPULAR_SEARCHES.get(business_type, _POPULAR_SEARCHES["general"]))


def _now_ms() -> int:
    return int(time.time() * 1000)


class SuggestionStore:
    """
    Owns the search history and exposes trending terms.

    History is kept reverse-chronological, capped at ten entries and free of
    duplicate query strings. A plain list of the five most recent queries is
    mirrored under ``recent_searches`` for lightweight clients.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        fallback_trending: Sequence[str] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.store = store
        self.fallback_trending = list(fallback_trending or [])
        self._clock = clock or _now_ms

    def history(self) -> list[SearchHistoryEntry]:
        raw_entries: Any = self.store.get(HISTORY_KEY, [])
        if not isinstance(raw_entries, list):
            return []
        entries: list[SearchHistoryEntry] = []
        for raw in raw_entries:
            try:
                entries.append(SearchHistoryEntry.model_validate(raw))
            except ValidationError:
                continue
        return entries

    def record_search(self, query: str, result_count: int) -> None:
        text = query.strip()
        if not text:
            return
        history = self.history()
        timestamp = self._clock()
        if history and timestamp <= history[0].timestamp:
            # keep timestamps strictly decreasing from the head
            timestamp = history[0].timestamp + 1
        entry = SearchHistoryEntry(
            query=text, timestamp=timestamp, results=max(result_count, 0)
        )
        remaining = [item for item in history if item.query != text]
        updated = [entry, *remaining][:MAX_HISTORY]
        self.store.set(HISTORY_KEY, [item.model_dump() for item in updated])

        recent = [text, *(item for item in self.recent_searches() if item != text)]
        self.store.set(RECENT_SEARCHES_KEY, recent[:MAX_RECENT])

    def recent_searches(self) -> list[str]:
        raw: Any = self.store.get(RECENT_SEARCHES_KEY, [])
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, str)]

    def clear_history(self) -> None:
        self.store.set(HISTORY_KEY, [])
        self.store.set(RECENT_SEARCHES_KEY, [])

    def trending(self) -> list[str]:
        raw: Any = self.store.get(TRENDING_KEY, [])
        terms = [item for item in raw if isinstance(item, str)] if isinstance(raw, list) else []
        return terms or list(self.fallback_trending)

    def set_trending(self, terms: Sequence[str]) -> None:
        cleaned = [term.strip() for term in terms if term.strip()]
        self.store.set(TRENDING_KEY, cleaned)

    def merged_suggestions(self) -> list[str]:
        """History queries (most recent five) followed by up to five trending terms."""
        recent = [entry.query for entry in self.history()[:MERGED_HISTORY]]
        return recent + self.trending()[:MERGED_TRENDING]


class SuggestionNavigator:
    """Selection cursor over the merged suggestion list; ``-1`` means none."""

    def __init__(self) -> None:
        self.index = -1
        self.open = False

    def move_down(self, length: int) -> int:
        self.index = max(min(self.index + 1, length - 1), -1)
        return self.index

    def move_up(self) -> int:
        self.index = max(self.index - 1, -1)
        return self.index

    def selected(self, suggestions: Sequence[str]) -> str | None:
        if 0 <= self.index < len(suggestions):
            return suggestions[self.index]
        return None

    def reset(self) -> None:
        self.index = -1

    def show(self) -> None:
        self.open = True

    def close(self) -> None:
        self.open = False
        self.index = -1
