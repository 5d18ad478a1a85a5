from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from tripease.dependencies import CatalogDep, SettingsDep
from tripease.schemas.offer import Offer
from tripease.schemas.responses import CatalogPageResponse, PageMeta
from tripease.services.catalog import DEFAULT_SORT

router = APIRouter(prefix="/api/trips")


@router.get("", response_model=CatalogPageResponse)
async def list_trips(
    catalog: CatalogDep,
    settings: SettingsDep,
    q: str | None = None,
    category: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    sort: str = DEFAULT_SORT,
) -> CatalogPageResponse:
    """Browse the local catalog. External providers are not consulted here."""
    result = await catalog.search(
        keyword=q,
        category=category,
        page=page,
        limit=limit or settings.default_page_limit,
        sort=sort,
    )
    return CatalogPageResponse(
        data=[item.to_offer() for item in result.items],
        meta=PageMeta(total=result.total, page=result.page, pages=result.pages, limit=result.limit),
    )


@router.get("/{trip_id}", response_model=Offer)
async def get_trip(trip_id: str, catalog: CatalogDep) -> Offer:
    item = await catalog.get(trip_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Trip not found")
    return item.to_offer()
