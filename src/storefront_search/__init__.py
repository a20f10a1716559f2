"""
Storefront Search - query-driven product search and ranking.

This package ranks a tenant's catalog against free-text or voice input,
optionally enriched by Google Gemini intent analysis, and keeps a
deduplicated recent-search history merged with trending terms.

Example usage:
    >>> from storefront_search import InMemoryCatalog, SearchPipeline
    >>> pipeline = SearchPipeline(InMemoryCatalog({"shop": products}))
    >>> result = await pipeline.search("paracetamol", tenant_id="shop")
"""

from .analyzer import (
    GeminiIntentClient,
    InferenceClient,
    IntentAnalyzer,
    build_intent_analyzer,
)
from .catalog import (
    CatalogProvider,
    CatalogUnavailableError,
    InMemoryCatalog,
    JsonFileCatalog,
)
from .config import SearchSettings, resolve_db_path
from .controller import InputState, QueryInputController, create_controller
from .models import (
    BusinessType,
    IntentAnalysis,
    Notice,
    Product,
    ScoredProduct,
    SearchHistoryEntry,
    SearchResult,
    normalize_query,
)
from .pipeline import SearchOutcome, SearchPipeline, build_result
from .storage import DuckDBKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from .suggestions import SuggestionNavigator, SuggestionStore, popular_searches
from .voice import (
    VoiceCapability,
    VoiceController,
    VoiceEvent,
    VoiceRecognitionError,
    VoiceState,
    VoiceUnavailableError,
)

__all__ = [
    # Analyzer
    "GeminiIntentClient",
    "InferenceClient",
    "IntentAnalyzer",
    "build_intent_analyzer",
    # Catalog
    "CatalogProvider",
    "CatalogUnavailableError",
    "InMemoryCatalog",
    "JsonFileCatalog",
    # Config
    "SearchSettings",
    "resolve_db_path",
    # Controller
    "InputState",
    "QueryInputController",
    "create_controller",
    # Models
    "BusinessType",
    "IntentAnalysis",
    "Notice",
    "Product",
    "ScoredProduct",
    "SearchHistoryEntry",
    "SearchResult",
    "normalize_query",
    # Pipeline
    "SearchOutcome",
    "SearchPipeline",
    "build_result",
    # Storage
    "DuckDBKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    # Suggestions
    "SuggestionNavigator",
    "SuggestionStore",
    "popular_searches",
    # Voice
    "VoiceCapability",
    "VoiceController",
    "VoiceEvent",
    "VoiceRecognitionError",
    "VoiceState",
    "VoiceUnavailableError",
]
