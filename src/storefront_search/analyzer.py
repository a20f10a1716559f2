"""
Optional AI-assisted query understanding.

The analyzer asks an inference collaborator for an ``IntentAnalysis`` and
bounds the call with a timeout. Any failure means "no analysis available":
the lexical ranking path never depends on it.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Protocol

from google.genai import Client as GenAIClient
from google.genai.types import HttpOptions

from .config import ENV_API_KEY, SearchSettings
from .models import BusinessType, IntentAnalysis

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

_VOCABULARY_HINTS: dict[str, str] = {
    "pharmacy": "medicines, symptoms such as fever or headache, health conditions, vitamins and personal care",
    "grocery": "fresh produce, staples like rice and cooking oil, dairy, snacks, beverages and spices",
    "general": "electronics, clothing, home appliances, books, beauty products and sports equipment",
}

PROMPT_TEMPLATE = """
You are a smart search assistant for a {business_type} store.
Shoppers typically look for {vocabulary}.

Search query: "{query}"

Analyze the query:
- Determine whether this is a product name search, a symptom search, a health condition search, or a category search
- Suggest related search terms that products matching the shopper's need would contain
- Suggest follow-up searches the shopper might run next
- Briefly explain what the shopper is looking for
"""


class InferenceClient(Protocol):
    async def analyze_query(
        self, text: str, business_type: BusinessType
    ) -> IntentAnalysis:
        """Return a structured analysis of *text* or raise on failure."""


def build_prompt(text: str, business_type: BusinessType) -> str:
    vocabulary = _VOCABULARY_HINTS.get(business_type, _VOCABULARY_HINTS["general"])
    return PROMPT_TEMPLATE.format(
        business_type=business_type, vocabulary=vocabulary, query=text
    )


class GeminiIntentClient:
    """Inference collaborator backed by Google Gemini structured output."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or DEFAULT_MODEL
        if client is not None:
            self._client = client
            return
        if api_key is None:
            api_key = os.getenv(ENV_API_KEY)
        if api_key is None:
            raise ValueError(
                "GOOGLE_API_KEY not found within the current environment: please export it or provide it to the class constructor."
            )
        self._client = GenAIClient(
            api_key=api_key, http_options=HttpOptions(api_version="v1beta")
        )

    async def analyze_query(
        self, text: str, business_type: BusinessType
    ) -> IntentAnalysis:
        response = await self._client.aio.models.generate_content(
            model=self.model,
            contents=build_prompt(text, business_type),
            config={
                "response_mime_type": "application/json",
                "response_json_schema": IntentAnalysis.model_json_schema(),
            },
        )
        if response.text is None:
            raise ValueError("Inference response did not contain any text")
        return IntentAnalysis.model_validate_json(response.text)


class IntentAnalyzer:
    """Timeout-bounded wrapper that never raises to its caller."""

    def __init__(self, client: InferenceClient, *, timeout_seconds: float = 5.0) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def analyze(
        self, text: str, business_type: BusinessType = "pharmacy"
    ) -> IntentAnalysis | None:
        if not text:
            return None
        try:
            return await asyncio.wait_for(
                self.client.analyze_query(text, business_type),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "intent analysis timed out after %.2fs q=%r", self.timeout_seconds, text
            )
        except Exception as exc:
            logger.warning("intent analysis unavailable q=%r: %s", text, exc)
        return None


def build_intent_analyzer(settings: SearchSettings) -> IntentAnalyzer | None:
    """Return an analyzer for *settings*, or ``None`` when AI search is off."""
    if not settings.ai_enabled:
        return None
    if settings.api_key is None:
        logger.info("GOOGLE_API_KEY not set, AI-assisted search disabled")
        return None
    client = GeminiIntentClient(settings.api_key, model=settings.model)
    return IntentAnalyzer(client, timeout_seconds=settings.ai_timeout_seconds)
