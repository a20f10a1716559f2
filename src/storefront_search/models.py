"""
Data model shared by the search pipeline, ranking engine and suggestion store.
"""

from __future__ import annotations

from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

BusinessType: TypeAlias = Literal["pharmacy", "grocery", "general"]
SearchType: TypeAlias = Literal["product", "symptom", "condition", "category"]
MatchReason: TypeAlias = Literal["name", "brand", "description", "category"]
NoticeLevel: TypeAlias = Literal["info", "error"]


class Product(BaseModel):
    """Catalog product, read-only for the duration of a search"""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    name: str
    description: str | None = None
    category: str = "General"
    brand: str | None = None
    price: float = 0.0
    requires_rx: bool = False
    uses: str | None = None
    symptoms: str | None = None
    tags: tuple[str, ...] = ()


class IntentAnalysis(BaseModel):
    """Classification and expansion terms proposed for a shopper's query"""

    search_type: SearchType = Field(
        description="Whether the shopper is looking for a product by name, a symptom, a health condition or a category"
    )
    keywords: list[str] = Field(
        default_factory=list,
        description="Related search terms that should also match catalog products",
    )
    suggestions: list[str] = Field(
        default_factory=list,
        description="Follow-up queries the shopper might want to run next",
    )
    ai_explanation: str | None = Field(
        default=None,
        description="Brief explanation of what the shopper is looking for",
    )


class ScoredProduct(BaseModel):
    """Product with the relevance score and reason it matched"""

    model_config = ConfigDict(frozen=True)

    product: Product
    relevance_score: int = Field(ge=0)
    match_reason: MatchReason


class SearchResult(BaseModel):
    """Outcome of one search invocation, handed to the result sink"""

    products: list[ScoredProduct] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    total_count: int = 0
    search_type: SearchType | None = None
    ai_explanation: str | None = None

    @classmethod
    def empty(cls) -> "SearchResult":
        return cls()


class SearchHistoryEntry(BaseModel):
    """A completed search, as remembered by the suggestion store"""

    model_config = ConfigDict(frozen=True)

    query: str
    timestamp: int = Field(description="Epoch milliseconds")
    results: int = Field(ge=0)


class Notice(BaseModel):
    """User-visible, non-fatal notification"""

    model_config = ConfigDict(frozen=True)

    level: NoticeLevel
    message: str
    description: str | None = None


def normalize_query(text: str | None) -> str:
    """Trim and case-fold raw input. Whitespace-only input normalizes to ``""``."""
    if text is None:
        return ""
    return text.strip().casefold()
