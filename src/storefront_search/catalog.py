"""
Catalog snapshot providers.

The search engine only ever reads the active, tenant-scoped products returned
by a provider; it never mutates them.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .models import Product


class CatalogUnavailableError(RuntimeError):
    """Raised when the active product list cannot be fetched."""


class CatalogProvider(Protocol):
    async def fetch_active_products(self, tenant_id: str) -> list[Product]:
        """Return the active products for *tenant_id*."""


class InMemoryCatalog:
    """Per-tenant catalog held in memory."""

    def __init__(
        self,
        products: Mapping[str, Iterable[Product]] | None = None,
        *,
        inactive_ids: Iterable[str] = (),
    ) -> None:
        self._products: dict[str, list[Product]] = {
            tenant: list(items) for tenant, items in (products or {}).items()
        }
        self._inactive_ids = set(inactive_ids)

    def add(self, tenant_id: str, product: Product, *, active: bool = True) -> None:
        self._products.setdefault(tenant_id, []).append(product)
        if not active:
            self._inactive_ids.add(product.id)

    async def fetch_active_products(self, tenant_id: str) -> list[Product]:
        return [
            product
            for product in self._products.get(tenant_id, [])
            if product.id not in self._inactive_ids
        ]


class JsonFileCatalog:
    """Catalog read from a JSON array of product records.

    Records may carry a ``tenant_id`` (records without one belong to every
    tenant) and an ``active`` flag (defaults to true).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    async def fetch_active_products(self, tenant_id: str) -> list[Product]:
        records = self._load_records()
        products: list[Product] = []
        for record in records:
            if not record.get("active", True):
                continue
            owner = record.get("tenant_id")
            if owner is not None and str(owner) != tenant_id:
                continue
            fields = {
                key: value
                for key, value in record.items()
                if key not in {"tenant_id", "active"}
            }
            try:
                products.append(Product.model_validate(fields))
            except ValidationError as exc:
                raise CatalogUnavailableError(
                    f"Invalid product record in {self.path}: {exc}"
                ) from exc
        return products

    def _load_records(self) -> list[dict[str, Any]]:
        if not self.path.exists() or not self.path.is_file():
            raise CatalogUnavailableError(f"No such catalog file: {self.path}")
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogUnavailableError(f"Could not read catalog {self.path}: {exc}") from exc
        if isinstance(payload, dict):
            payload = payload.get("products", [])
        if not isinstance(payload, list):
            raise CatalogUnavailableError(f"Catalog {self.path} must contain a list of products")
        return [record for record in payload if isinstance(record, dict)]
