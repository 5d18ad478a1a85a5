import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from tripease.data.catalog_seed import CATALOG_SEED
from tripease.exceptions.custom import CatalogError
from tripease.schemas.catalog import CatalogItem, CatalogPage
from tripease.schemas.offer import OfferKind

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100
DEFAULT_SORT = "-created_at"
SORT_FIELDS = ("created_at", "name", "rating")


class CatalogStore(Protocol):
    async def search(
        self,
        keyword: str | None = None,
        origin: str | None = None,
        destination: str | None = None,
        category: str | None = None,
        kinds: frozenset[OfferKind] = frozenset(),
        page: int = 1,
        limit: int = 20,
        sort: str = DEFAULT_SORT,
    ) -> CatalogPage: ...

    async def get(self, item_id: str) -> CatalogItem | None: ...


def _sort_key(sort: str) -> tuple[str, bool]:
    descending = sort.startswith("-")
    field = sort.lstrip("-")
    if field not in SORT_FIELDS:
        return _sort_key(DEFAULT_SORT)
    return field, descending


def _same_place(wanted: str, value: str | None) -> bool:
    return value is not None and value.strip().lower() == wanted.strip().lower()


class InMemoryCatalogStore:
    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._items: dict[str, CatalogItem] = {}
        for item in items or []:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: CatalogItem) -> None:
        self._items[item.id] = item

    async def get(self, item_id: str) -> CatalogItem | None:
        return self._items.get(item_id)

    async def search(
        self,
        keyword: str | None = None,
        origin: str | None = None,
        destination: str | None = None,
        category: str | None = None,
        kinds: frozenset[OfferKind] = frozenset(),
        page: int = 1,
        limit: int = 20,
        sort: str = DEFAULT_SORT,
    ) -> CatalogPage:
        needle = keyword.strip().lower() if keyword else ""
        wanted_category = category.strip().lower() if category else ""

        matches = []
        for item in self._items.values():
            if kinds and item.kind not in kinds:
                continue
            if wanted_category and (item.category or "").lower() != wanted_category:
                continue
            if origin and not _same_place(origin, item.origin):
                continue
            if destination and not _same_place(destination, item.destination or item.city):
                continue
            if needle and not any(needle in text.lower() for text in item.searchable_text()):
                continue
            matches.append(item)

        field, descending = _sort_key(sort)
        matches.sort(key=lambda i: (getattr(i, field), i.id), reverse=descending)

        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_LIMIT)
        start = (page - 1) * limit
        return CatalogPage(
            items=matches[start:start + limit],
            total=len(matches),
            page=page,
            limit=limit,
        )


def load_catalog(seed_path: str | None = None) -> InMemoryCatalogStore:
    """Build the local store from a JSON file, or from the bundled seed."""
    records: list[dict] = CATALOG_SEED
    if seed_path:
        try:
            records = json.loads(Path(seed_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise CatalogError(f"cannot read catalog seed {seed_path}: {exc}") from exc
        if not isinstance(records, list):
            raise CatalogError(f"catalog seed {seed_path} must be a JSON array")

    try:
        items = [CatalogItem(**record) for record in records]
    except (TypeError, ValidationError) as exc:
        raise CatalogError(f"invalid catalog record: {exc}") from exc

    logger.info("Loaded %d catalog items", len(items))
    return InMemoryCatalogStore(items)
