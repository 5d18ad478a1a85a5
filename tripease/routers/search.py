import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from tripease.dependencies import AggregationDep, SettingsDep
from tripease.schemas.offer import OfferKind
from tripease.schemas.responses import SearchMeta, SearchResponse
from tripease.schemas.search import SearchQuery
from tripease.services.aggregation import AggregationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

KIND_ROUTES: dict[str, OfferKind] = {
    "/destinations": OfferKind.destination,
    "/hotels": OfferKind.hotel,
    "/buses": OfferKind.bus,
    "/trains": OfferKind.train,
    "/flights": OfferKind.flight,
}


class SearchParams:
    def __init__(
        self,
        keyword: str | None = None,
        q: str | None = None,
        origin: str | None = None,
        destination: str | None = None,
        date: str | None = None,
        category: str | None = None,
        guests: Annotated[int | None, Query(ge=1)] = None,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    ):
        self.keyword = keyword or q
        self.origin = origin
        self.destination = destination
        self.date = date
        self.category = category
        self.guests = guests
        self.page = page
        self.limit = limit

    def to_query(self, kinds: frozenset[OfferKind]) -> SearchQuery:
        return SearchQuery(
            keyword=self.keyword,
            origin=self.origin,
            destination=self.destination,
            date=self.date,
            category=self.category,
            guests=self.guests,
            kinds=kinds,
        )


async def _run_search(
    service: AggregationService,
    params: SearchParams,
    kinds: frozenset[OfferKind],
    default_limit: int,
) -> SearchResponse:
    query = params.to_query(kinds)
    result = await service.run(query)

    limit = params.limit or default_limit
    start = (params.page - 1) * limit
    total = len(result.offers)
    return SearchResponse(
        data=result.offers[start:start + limit],
        meta=SearchMeta(
            total=total,
            page=params.page,
            pages=-(-total // limit),
            limit=limit,
            mock=result.mock,
            providers=result.providers,
        ),
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    service: AggregationDep,
    settings: SettingsDep,
    params: Annotated[SearchParams, Depends()],
    kind: Annotated[list[OfferKind], Query()] = [],
) -> SearchResponse:
    return await _run_search(service, params, frozenset(kind), settings.default_page_limit)


def _kind_search(kind: OfferKind):
    async def endpoint(
        service: AggregationDep,
        settings: SettingsDep,
        params: Annotated[SearchParams, Depends()],
    ) -> SearchResponse:
        return await _run_search(service, params, frozenset({kind}), settings.default_page_limit)

    endpoint.__name__ = f"search_{kind.value}"
    return endpoint


for _path, _kind in KIND_ROUTES.items():
    router.add_api_route(
        _path,
        _kind_search(_kind),
        methods=["GET"],
        response_model=SearchResponse,
    )
