import asyncio
import logging
from dataclasses import dataclass, field

from tripease.exceptions.custom import CatalogError, ProviderError, RateLimitError
from tripease.mappers.offer_normalizer import normalize
from tripease.schemas.offer import Offer
from tripease.schemas.responses import ProviderStatus
from tripease.schemas.search import SearchQuery
from tripease.services.catalog import MAX_PAGE_LIMIT, CatalogStore
from tripease.services.mock_offers import MockOfferGenerator
from tripease.services.provider_client import ProviderClient

logger = logging.getLogger(__name__)

HEALTHY = ("ok", "cached")


@dataclass
class SearchResult:
    offers: list[Offer]
    providers: list[ProviderStatus] = field(default_factory=list)
    mock: bool = False


@dataclass
class _Branch:
    status: ProviderStatus
    records: list[dict] = field(default_factory=list)


def _normalize_record(record: dict, provider: ProviderClient) -> Offer:
    try:
        return normalize(record, provider.name, provider.kind)
    except Exception:
        logger.exception("Could not normalize a %s record, keeping a placeholder", provider.name)
        return normalize({}, provider.name, provider.kind)


class AggregationService:
    """Fan a search out to the local catalog and every selected provider.

    Provider failures are logged and contribute nothing. Only a catalog
    failure is raised, as :class:`CatalogError`. Provider offers come first,
    in configured provider order, followed by local offers.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        providers: list[ProviderClient],
        mock_generator: MockOfferGenerator | None = None,
        deadline: float | None = 8.0,
        catalog_limit: int = MAX_PAGE_LIMIT,
    ):
        self._catalog = catalog
        self._providers = providers
        self._mock = mock_generator or MockOfferGenerator()
        self._deadline = deadline
        self._catalog_limit = catalog_limit

    @property
    def providers(self) -> list[ProviderClient]:
        return list(self._providers)

    async def search(
        self,
        query: SearchQuery,
        *,
        include_providers: bool = True,
        deadline: float | None = None,
    ) -> list[Offer]:
        result = await self.run(query, include_providers=include_providers, deadline=deadline)
        return result.offers

    async def run(
        self,
        query: SearchQuery,
        *,
        include_providers: bool = True,
        deadline: float | None = None,
    ) -> SearchResult:
        selected = [p for p in self._providers if include_providers and query.wants(p.kind)]
        skipped = [
            ProviderStatus(name=p.name, status="skipped")
            for p in self._providers
            if p not in selected
        ]

        catalog_task = asyncio.create_task(self._query_catalog(query))
        provider_tasks = {
            p.name: asyncio.create_task(self._query_provider(p, query)) for p in selected
        }
        tasks = [catalog_task, *provider_tasks.values()]
        timeout = self._deadline if deadline is None else deadline
        try:
            _done, pending = await asyncio.wait(tasks, timeout=timeout)
        finally:
            # Deadline reached or the caller was cancelled
            unfinished = [task for task in tasks if not task.done()]
            for task in unfinished:
                task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)

        if catalog_task in pending:
            raise CatalogError("catalog query exceeded the search deadline")
        local_offers = catalog_task.result()

        offers: list[Offer] = []
        statuses: list[ProviderStatus] = []
        for provider in selected:
            task = provider_tasks[provider.name]
            if task in pending:
                logger.warning("Provider %s cancelled at the search deadline", provider.name)
                statuses.append(
                    ProviderStatus(name=provider.name, status="failed", detail="deadline exceeded")
                )
                continue
            branch = task.result()
            statuses.append(branch.status)
            offers.extend(_normalize_record(record, provider) for record in branch.records)

        offers.extend(local_offers)

        mock = False
        if not offers and not any(s.status in HEALTHY for s in statuses):
            offers = self._mock.generate(query)
            mock = True
            logger.info("No provider data for %s, serving %d mock offers", query.signature(), len(offers))

        return SearchResult(offers=offers, providers=statuses + skipped, mock=mock)

    async def _query_catalog(self, query: SearchQuery) -> list[Offer]:
        try:
            page = await self._catalog.search(
                keyword=query.keyword,
                origin=query.origin,
                destination=query.destination,
                category=query.category,
                kinds=query.kinds,
                limit=self._catalog_limit,
            )
        except CatalogError:
            raise
        except Exception as exc:
            logger.exception("Catalog query failed")
            raise CatalogError(str(exc)) from exc
        return [item.to_offer() for item in page.items]

    async def _query_provider(self, provider: ProviderClient, query: SearchQuery) -> _Branch:
        try:
            result = await provider.fetch(query)
        except RateLimitError as exc:
            logger.warning("Provider %s rate limited", provider.name)
            return _Branch(ProviderStatus(name=provider.name, status="rate_limited", detail=exc.message))
        except ProviderError as exc:
            logger.warning(
                "Provider %s failed: %s (status=%s)", provider.name, exc.message, exc.status_code
            )
            return _Branch(ProviderStatus(name=provider.name, status="failed", detail=exc.message))
        except Exception as exc:
            logger.exception("Provider %s raised unexpectedly", provider.name)
            return _Branch(ProviderStatus(name=provider.name, status="failed", detail=str(exc)))

        status = "cached" if result.cached else "ok"
        return _Branch(
            ProviderStatus(name=provider.name, status=status, count=len(result.records)),
            result.records,
        )
