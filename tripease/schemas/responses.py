from __future__ import annotations

from pydantic import BaseModel

from tripease.schemas.offer import Offer


class ProviderStatus(BaseModel):
    name: str
    status: str  # "ok" | "cached" | "failed" | "rate_limited" | "skipped"
    count: int = 0
    detail: str | None = None


class PageMeta(BaseModel):
    total: int
    page: int
    pages: int
    limit: int


class SearchMeta(PageMeta):
    mock: bool = False
    providers: list[ProviderStatus] = []


class SearchResponse(BaseModel):
    data: list[Offer]
    meta: SearchMeta


class CatalogPageResponse(BaseModel):
    data: list[Offer]
    meta: PageMeta
