"""Lexical matching and ranking over catalog snapshots."""

from .matcher import (
    BRAND_SCORE,
    CATEGORY_SCORE,
    DESCRIPTION_SCORE,
    EXACT_NAME_BONUS,
    NAME_SCORE,
    query_terms,
    score_product,
)
from .ranker import compute_confidence, rank_products, summarize_categories

__all__ = [
    "BRAND_SCORE",
    "CATEGORY_SCORE",
    "DESCRIPTION_SCORE",
    "EXACT_NAME_BONUS",
    "NAME_SCORE",
    "query_terms",
    "score_product",
    "compute_confidence",
    "rank_products",
    "summarize_categories",
]
