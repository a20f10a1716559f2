"""Key-value stores backing search history."""

from .base import KeyValueStore
from .duckdb import DuckDBKeyValueStore
from .memory import InMemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "DuckDBKeyValueStore",
    "InMemoryKeyValueStore",
]
