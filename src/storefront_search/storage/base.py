"""
Key-value persistence interface used by the suggestion store.
"""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Minimal get/set store holding JSON-compatible values."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default* when absent."""

    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under *key*."""
