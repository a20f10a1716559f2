"""
Query input controller.

Turns keystrokes, keyboard navigation and voice transcripts into a single,
debounced stream of search invocations. All entry points run on the asyncio
event loop and never raise past the invocation boundary: failures become
``Notice`` events.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from .analyzer import build_intent_analyzer
from .catalog import CatalogProvider
from .config import SearchSettings
from .models import BusinessType, Notice, SearchResult
from .pipeline import CATALOG_UNAVAILABLE_MESSAGE, SearchOutcome, SearchPipeline
from .suggestions import SuggestionNavigator, SuggestionStore
from .voice import VoiceCapability, VoiceController

logger = logging.getLogger(__name__)

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
NO_MATCHES_MESSAGE = "No exact matches found"
NO_MATCHES_DESCRIPTION = "Try searching with different keywords or browse categories"

ResultSink = Callable[[SearchResult], None]
Notifier = Callable[[Notice], None]


class InputState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


class QueryInputController:
    def __init__(
        self,
        pipeline: SearchPipeline,
        store: SuggestionStore,
        *,
        sink: ResultSink,
        notify: Notifier | None = None,
        voice: VoiceCapability | VoiceController | None = None,
        tenant_id: str,
        business_type: BusinessType = "pharmacy",
        debounce_seconds: float = 0.3,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.sink = sink
        self.notify = notify
        self.voice = voice if isinstance(voice, VoiceController) else VoiceController(voice)
        self.tenant_id = tenant_id
        self.business_type = business_type
        self.debounce_seconds = debounce_seconds
        self.navigator = SuggestionNavigator()
        self.text = ""
        self._pending: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[SearchResult | None]] = set()
        self._generation = 0

    @property
    def input_state(self) -> InputState:
        return InputState.ARMED if self._pending is not None else InputState.IDLE

    @property
    def panel_open(self) -> bool:
        return self.navigator.open

    def on_text_changed(self, text: str) -> None:
        self.text = text
        self.navigator.reset()
        self._cancel_pending()
        self._pending = asyncio.get_running_loop().create_task(self._debounce())

    def on_submit(self, text: str | None = None) -> asyncio.Task[SearchResult | None]:
        self._cancel_pending()
        if text is not None:
            self.text = text
        return self._spawn(self.text)

    def on_clear(self) -> asyncio.Task[SearchResult | None]:
        self._cancel_pending()
        self.text = ""
        self.navigator.close()
        return self._spawn("")

    def on_focus(self) -> None:
        self.navigator.show()

    def on_key(self, key: str) -> asyncio.Task[SearchResult | None] | None:
        """Handle a navigation key; returns the search task when one starts."""
        if not self.navigator.open:
            return None
        suggestions = self.store.merged_suggestions()
        if key == "ArrowDown":
            self.navigator.move_down(len(suggestions))
        elif key == "ArrowUp":
            self.navigator.move_up()
        elif key == "Enter":
            selected = self.navigator.selected(suggestions)
            if selected is not None:
                return self.select_suggestion(selected)
        elif key == "Escape":
            self.navigator.close()
        return None

    def select_suggestion(self, suggestion: str) -> asyncio.Task[SearchResult | None]:
        self.navigator.close()
        return self.on_submit(suggestion)

    async def start_voice(self) -> SearchResult | None:
        outcome = await self.voice.listen()
        if outcome.error is not None:
            self._emit(Notice(level="error", message=str(outcome.error)))
            return None
        if outcome.transcript is None:
            return None
        return await self.on_submit(outcome.transcript)

    async def stop_voice(self) -> None:
        outcome = await self.voice.stop()
        if outcome.error is not None:
            self._emit(Notice(level="error", message=str(outcome.error)))

    async def drain(self) -> None:
        """Wait for the pending debounce timer and every in-flight search."""
        while self._pending is not None or self._inflight:
            waiting: list[asyncio.Task] = list(self._inflight)
            if self._pending is not None:
                waiting.append(self._pending)
            await asyncio.gather(*waiting, return_exceptions=True)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def _debounce(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # detach before searching so a later keystroke cannot cancel the search
        self._pending = None
        self._spawn(self.text)

    def _spawn(self, text: str) -> asyncio.Task[SearchResult | None]:
        self._generation += 1
        task = asyncio.get_running_loop().create_task(self._run(text, self._generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run(self, text: str, generation: int) -> SearchResult | None:
        try:
            outcome = await self.pipeline.execute(
                text, tenant_id=self.tenant_id, business_type=self.business_type
            )
        except Exception:
            logger.exception("search failed q=%r", text)
            if generation == self._generation:
                self._emit(Notice(level="error", message=SEARCH_FAILED_MESSAGE))
            return None

        if generation != self._generation:
            logger.debug("discarding superseded result q=%r", text)
            return None

        result = outcome.result
        try:
            self._apply(text, outcome)
        except Exception:
            logger.exception("applying search result failed q=%r", text)
            self._emit(Notice(level="error", message=SEARCH_FAILED_MESSAGE))
            return None
        return result

    def _apply(self, text: str, outcome: SearchOutcome) -> None:
        result = outcome.result
        if not outcome.catalog_available:
            self._emit(Notice(level="error", message=CATALOG_UNAVAILABLE_MESSAGE))
        self.sink(result)

        query = text.strip()
        if not query:
            self.navigator.close()
            return
        if not outcome.catalog_available:
            return

        self.store.record_search(query, len(result.products))
        self.navigator.show()
        if not result.products:
            self._emit(
                Notice(level="info", message=NO_MATCHES_MESSAGE, description=NO_MATCHES_DESCRIPTION)
            )

    def _emit(self, notice: Notice) -> None:
        if self.notify is not None:
            self.notify(notice)


def create_controller(
    catalog: CatalogProvider,
    store: SuggestionStore,
    *,
    sink: ResultSink,
    tenant_id: str,
    business_type: BusinessType = "pharmacy",
    notify: Notifier | None = None,
    voice: VoiceCapability | None = None,
    settings: SearchSettings | None = None,
) -> QueryInputController:
    """Wire a controller and pipeline from *settings* (environment by default)."""
    settings = settings or SearchSettings.from_env()
    pipeline = SearchPipeline(
        catalog,
        build_intent_analyzer(settings),
        max_results=settings.max_results,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )
    return QueryInputController(
        pipeline,
        store,
        sink=sink,
        notify=notify,
        voice=voice,
        tenant_id=tenant_id,
        business_type=business_type,
        debounce_seconds=settings.debounce_seconds,
    )
