"""
Search pipeline: catalog snapshot, optional intent analysis, lexical ranking.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from time import perf_counter

from .analyzer import IntentAnalyzer
from .catalog import CatalogProvider
from .models import (
    BusinessType,
    IntentAnalysis,
    Notice,
    Product,
    SearchResult,
    normalize_query,
)
from .search import compute_confidence, rank_products, summarize_categories

logger = logging.getLogger(__name__)

CATALOG_UNAVAILABLE_MESSAGE = "Could not load products. Please try again."

CacheKey = tuple[str, str, str]


def build_result(
    query: str,
    products: Sequence[Product],
    analysis: IntentAnalysis | None = None,
    *,
    max_results: int | None = None,
) -> SearchResult:
    """Rank *products* for an already-normalized *query*."""
    if not query:
        return SearchResult.empty()
    keywords = analysis.keywords if analysis is not None else []
    ranked = rank_products(products, query, keywords)
    top = ranked[:max_results] if max_results is not None else ranked
    return SearchResult(
        products=top,
        suggestions=list(analysis.suggestions) if analysis is not None else [],
        categories=summarize_categories(top),
        confidence=compute_confidence(top),
        total_count=len(ranked),
        search_type=analysis.search_type if analysis is not None else None,
        ai_explanation=analysis.ai_explanation if analysis is not None else None,
    )


@dataclass(frozen=True)
class SearchOutcome:
    """A search result plus which collaborators contributed to it."""

    result: SearchResult
    catalog_available: bool = True
    analysis_available: bool = False
    cached: bool = False


class SearchPipeline:
    """Runs one search end to end and always returns a ``SearchResult``.

    ``notify`` receives the catalog-unavailable notice when the pipeline is
    used on its own; ``QueryInputController`` leaves it unset and reports the
    failure itself so superseded searches stay silent.
    """

    def __init__(
        self,
        catalog: CatalogProvider,
        analyzer: IntentAnalyzer | None = None,
        *,
        max_results: int = 50,
        cache_ttl_seconds: float = 300,
        notify: Callable[[Notice], None] | None = None,
    ) -> None:
        self.catalog = catalog
        self.analyzer = analyzer
        self.max_results = max_results
        self.cache_ttl_seconds = cache_ttl_seconds
        self.notify = notify
        self._cache: dict[CacheKey, tuple[float, SearchResult]] = {}

    async def search(
        self,
        text: str,
        *,
        tenant_id: str,
        business_type: BusinessType = "pharmacy",
    ) -> SearchResult:
        outcome = await self.execute(text, tenant_id=tenant_id, business_type=business_type)
        return outcome.result

    async def execute(
        self,
        text: str,
        *,
        tenant_id: str,
        business_type: BusinessType = "pharmacy",
    ) -> SearchOutcome:
        query = normalize_query(text)
        if not query:
            return SearchOutcome(result=SearchResult.empty())

        cache_key: CacheKey = (tenant_id, business_type, query)
        cached = self._cache_get(cache_key)
        if cached is not None:
            logger.debug("cache_hit q=%r tenant=%s", query, tenant_id)
            return SearchOutcome(result=cached, analysis_available=True, cached=True)

        t0 = perf_counter()
        analysis_task: asyncio.Task[IntentAnalysis | None] | None = None
        if self.analyzer is not None:
            analysis_task = asyncio.create_task(self.analyzer.analyze(query, business_type))

        try:
            products = await self.catalog.fetch_active_products(tenant_id)
        except Exception as exc:
            if analysis_task is not None:
                analysis_task.cancel()
            logger.warning("catalog unavailable tenant=%s: %s", tenant_id, exc)
            self._emit(Notice(level="error", message=CATALOG_UNAVAILABLE_MESSAGE))
            return SearchOutcome(result=SearchResult.empty(), catalog_available=False)
        t1 = perf_counter()

        analysis = await analysis_task if analysis_task is not None else None
        t2 = perf_counter()

        result = build_result(query, products, analysis, max_results=self.max_results)
        t3 = perf_counter()

        logger.info(
            "timing: total=%.2fms catalog=%.2fms analysis_wait=%.2fms rank=%.2fms q=%r hits=%d ai=%s",
            (t3 - t0) * 1000,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            (t3 - t2) * 1000,
            query,
            result.total_count,
            analysis is not None,
        )

        if analysis is not None:
            self._cache_set(cache_key, result)
        return SearchOutcome(result=result, analysis_available=analysis is not None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cache_get(self, key: CacheKey) -> SearchResult | None:
        value = self._cache.get(key)
        if value is None:
            return None
        expires_at, result = value
        if expires_at < time.monotonic():
            self._cache.pop(key, None)
            return None
        return result.model_copy(deep=True)

    def _cache_set(self, key: CacheKey, result: SearchResult) -> None:
        if self.cache_ttl_seconds <= 0:
            return
        # sinks may mutate what they receive
        self._cache[key] = (time.monotonic() + self.cache_ttl_seconds, result.model_copy(deep=True))

    def _emit(self, notice: Notice) -> None:
        if self.notify is not None:
            self.notify(notice)
