"""
Ranking helpers turning a catalog snapshot into an ordered result list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models import Product, ScoredProduct
from .matcher import NAME_SCORE, query_terms, score_product


def rank_products(
    products: Iterable[Product],
    query: str,
    keywords: Sequence[str] = (),
    *,
    limit: int | None = None,
) -> list[ScoredProduct]:
    """Score every product and sort matches by descending relevance.

    ``sorted`` is stable, so equal scores keep catalog iteration order.
    """
    if not query:
        return []
    terms = query_terms(query, keywords)
    scored = [
        hit
        for hit in (score_product(product, query, keywords, terms=terms) for product in products)
        if hit is not None
    ]
    ordered = sorted(scored, key=lambda hit: -hit.relevance_score)
    if limit is not None:
        return ordered[: max(limit, 0)]
    return ordered


def compute_confidence(ranked: Sequence[ScoredProduct]) -> float:
    """Map the best score onto [0, 1]; name-level matches saturate at 1.0."""
    if not ranked:
        return 0.0
    top_score = max(hit.relevance_score for hit in ranked)
    return min(top_score / NAME_SCORE, 1.0)


def summarize_categories(ranked: Iterable[ScoredProduct]) -> list[str]:
    """Distinct categories of the ranked products, in order of first appearance."""
    seen: set[str] = set()
    categories: list[str] = []
    for hit in ranked:
        category = hit.product.category
        if category not in seen:
            seen.add(category)
            categories.append(category)
    return categories
