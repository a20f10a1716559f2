"""
Lexical matching of catalog products against a normalized query.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ..models import MatchReason, Product, ScoredProduct

NAME_SCORE = 100
BRAND_SCORE = 80
DESCRIPTION_SCORE = 60
CATEGORY_SCORE = 30
EXACT_NAME_BONUS = 50

_WORD_RE = re.compile(r"[^\W_]+")


def _fold(value: str | None) -> str:
    return value.casefold() if value else ""


def query_terms(query: str, keywords: Iterable[str] = ()) -> list[str]:
    """Return the ordered, de-duplicated terms used for category/tag overlap.

    Terms are the whole query, its words longer than two characters, and the
    expansion keywords.
    """
    terms: list[str] = []
    candidates = [query, *_WORD_RE.findall(query)]
    for candidate in candidates:
        if len(candidate) <= 2 and candidate != query:
            continue
        if candidate and candidate not in terms:
            terms.append(candidate)
    for keyword in keywords:
        folded = _fold(keyword).strip()
        if folded and folded not in terms:
            terms.append(folded)
    return terms


def _overlaps(
    product: Product, terms: Sequence[str], keywords: Sequence[str]
) -> bool:
    attribute_fields = [
        _fold(product.category),
        _fold(product.uses),
        _fold(product.symptoms),
        *(_fold(tag) for tag in product.tags),
    ]
    for term in terms:
        if any(term in field for field in attribute_fields if field):
            return True

    # expansion keywords may also surface products through their text fields
    text_fields = [_fold(product.name), _fold(product.brand), _fold(product.description)]
    for keyword in keywords:
        if any(keyword in field for field in text_fields if field):
            return True
    return False


def score_product(
    product: Product,
    query: str,
    keywords: Sequence[str] = (),
    *,
    terms: Sequence[str] | None = None,
) -> ScoredProduct | None:
    """Score a single product, or return ``None`` when nothing matches.

    ``query`` must already be normalized. The first matching rule decides the
    base score and match reason; an exact name match adds a bonus on top.
    """
    if not query:
        return None

    name = _fold(product.name)
    reason: MatchReason
    if query in name:
        score, reason = NAME_SCORE, "name"
    elif query in _fold(product.brand):
        score, reason = BRAND_SCORE, "brand"
    elif query in _fold(product.description):
        score, reason = DESCRIPTION_SCORE, "description"
    else:
        folded_keywords = [k for k in (_fold(k).strip() for k in keywords) if k]
        resolved_terms = terms if terms is not None else query_terms(query, folded_keywords)
        if not _overlaps(product, resolved_terms, folded_keywords):
            return None
        score, reason = CATEGORY_SCORE, "category"

    if name == query:
        score += EXACT_NAME_BONUS

    return ScoredProduct(product=product, relevance_score=score, match_reason=reason)
