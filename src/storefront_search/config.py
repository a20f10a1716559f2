"""
Environment-driven settings for the search subsystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_DB_PATH = "~/.storefront_search/state.duckdb"
ENV_DB_PATH = "STOREFRONT_SEARCH_DB_PATH"
ENV_API_KEY = "GOOGLE_API_KEY"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SearchSettings:
    debounce_seconds: float = 0.3
    ai_timeout_seconds: float = 5.0
    max_results: int = 50
    cache_ttl_seconds: int = 300
    model: str = "gemini-2.5-flash"
    ai_enabled: bool = True
    api_key: str | None = None

    @classmethod
    def from_env(cls) -> "SearchSettings":
        return cls(
            debounce_seconds=_env_int("STOREFRONT_SEARCH_DEBOUNCE_MS", 300) / 1000,
            ai_timeout_seconds=_env_float("STOREFRONT_SEARCH_AI_TIMEOUT_SECONDS", 5.0),
            max_results=_env_int("STOREFRONT_SEARCH_MAX_RESULTS", 50, minimum=1),
            cache_ttl_seconds=_env_int("STOREFRONT_SEARCH_CACHE_TTL_SECONDS", 300),
            model=os.getenv("STOREFRONT_SEARCH_MODEL", "gemini-2.5-flash").strip()
            or "gemini-2.5-flash",
            ai_enabled=_env_bool("STOREFRONT_SEARCH_AI_ENABLED", True),
            api_key=os.getenv(ENV_API_KEY) or None,
        )


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) STOREFRONT_SEARCH_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)
