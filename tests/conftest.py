import asyncio

import pytest
from google.genai.types import (
    HttpOptions,
    Content,
    GenerateContentResponse,
    Candidate,
    Part,
)

from storefront_search.catalog import CatalogUnavailableError, InMemoryCatalog
from storefront_search.models import BusinessType, IntentAnalysis, Product
from storefront_search.storage import InMemoryKeyValueStore
from storefront_search.suggestions import SuggestionStore


FEVER_ANALYSIS = IntentAnalysis(
    search_type="symptom",
    keywords=["fever", "antipyretic"],
    suggestions=["fever tablets", "thermometer"],
    ai_explanation="Looking for medicine that reduces fever",
)


class MockModels:
    def __init__(self, text: str | None) -> None:
        self.text = text
        self.calls: list[dict] = []

    async def generate_content(self, *args, **kwargs) -> GenerateContentResponse:
        self.calls.append(kwargs)
        parts = [Part.from_text(text=self.text)] if self.text is not None else []
        return GenerateContentResponse(
            candidates=[Candidate(content=Content(role="model", parts=parts))]
        )


class MockAio:
    def __init__(self, models: MockModels) -> None:
        self._models = models

    @property
    def models(self) -> MockModels:
        return self._models


class MockGenAIClient:
    def __init__(
        self,
        api_key: str = "test-api-key",
        http_options: HttpOptions | None = None,
        *,
        text: str | None = FEVER_ANALYSIS.model_dump_json(),
    ) -> None:
        self._aio = MockAio(MockModels(text))

    @property
    def aio(self) -> MockAio:
        return self._aio


class StaticInferenceClient:
    """Returns a fixed analysis, optionally after a delay."""

    def __init__(self, analysis: IntentAnalysis, *, delay: float = 0.0) -> None:
        self.analysis = analysis
        self.delay = delay
        self.calls: list[tuple[str, BusinessType]] = []
        self.completed = 0

    async def analyze_query(self, text: str, business_type: BusinessType) -> IntentAnalysis:
        self.calls.append((text, business_type))
        if self.delay:
            await asyncio.sleep(self.delay)
        self.completed += 1
        return self.analysis


class FailingInferenceClient:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def analyze_query(self, text: str, business_type: BusinessType) -> IntentAnalysis:
        raise self.exc


class CountingCatalog(InMemoryCatalog):
    """In-memory catalog that records fetches and can be told to fail or stall."""

    def __init__(self, products, *, fail: bool = False, delay: float = 0.0) -> None:
        super().__init__(products)
        self.fail = fail
        self.delay = delay
        self.fetches: list[str] = []

    async def fetch_active_products(self, tenant_id: str) -> list[Product]:
        self.fetches.append(tenant_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise CatalogUnavailableError("catalog backend is down")
        return await super().fetch_active_products(tenant_id)


class FakeVoice:
    def __init__(self, transcript: str | None = "paracetamol", *, error: Exception | None = None) -> None:
        self.transcript = transcript
        self.error = error
        self.started = 0
        self.stopped = 0

    async def start_listening(self) -> str:
        self.started += 1
        if self.error is not None:
            raise self.error
        return self.transcript or ""

    async def stop_listening(self) -> None:
        self.stopped += 1


@pytest.fixture()
def products() -> list[Product]:
    return [
        Product(
            id="p1",
            name="Paracetamol 500mg Tablets",
            description="Relieves mild pain and reduces fever",
            category="Pain Relief",
            brand="Calpol",
            price=25.0,
            uses="fever, headache",
            symptoms="fever",
            tags=("analgesic", "tablet"),
        ),
        Product(
            id="p2",
            name="Crocin Advance",
            description="Paracetamol 650mg for fast relief from headache",
            category="Pain Relief",
            brand="Crocin",
            price=30.0,
            uses="headache",
            tags=("analgesic",),
        ),
        Product(
            id="p3",
            name="Benadryl Cough Syrup",
            description="Soothes dry cough",
            category="Cold & Cough",
            brand="Johnson",
            price=95.0,
            symptoms="cough",
            tags=("syrup",),
        ),
        Product(
            id="p4",
            name="Digital Thermometer",
            description="Accurate temperature readings for fever checks",
            category="Health Devices",
            brand="Omron",
            price=250.0,
        ),
        Product(
            id="p5",
            name="Amoxicillin 250mg",
            description="Antibiotic for bacterial infections",
            category="Antibiotics",
            brand="Mox",
            price=80.0,
            requires_rx=True,
            tags=("antibiotic", "prescription"),
        ),
    ]


@pytest.fixture()
def catalog(products: list[Product]) -> CountingCatalog:
    return CountingCatalog({"pharma-1": products})


@pytest.fixture()
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def suggestion_store(kv_store: InMemoryKeyValueStore) -> SuggestionStore:
    ticks = iter(range(1_000, 1_000_000, 10))
    return SuggestionStore(kv_store, clock=lambda: next(ticks))
