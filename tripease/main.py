import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from tripease.config import Settings
from tripease.exceptions.custom import CatalogError
from tripease.exceptions.handlers import catalog_error_handler
from tripease.mappers.offer_normalizer import KIND_BY_PROVIDER
from tripease.routers.search import router as search_router
from tripease.routers.trips import router as trips_router
from tripease.services.aggregation import AggregationService
from tripease.services.catalog import load_catalog
from tripease.services.mock_offers import MockOfferGenerator
from tripease.services.provider_client import ProviderClient
from tripease.services.result_cache import ResultCache
from tripease.services.token_cache import OAuthCredentials, TokenCache

logger = logging.getLogger(__name__)


async def _sweep_caches(caches: list[ResultCache], interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = sum(cache.sweep() for cache in caches)
        if removed:
            logger.debug("Swept %d expired cache entries", removed)


def build_providers(
    settings: Settings,
    client: httpx.AsyncClient,
    token_cache: TokenCache,
) -> list[ProviderClient]:
    providers = []
    for name, provider_settings in settings.providers().items():
        if not provider_settings.enabled:
            logger.info("Provider %s not configured, skipping", name)
            continue
        providers.append(
            ProviderClient(
                name,
                KIND_BY_PROVIDER[name],
                provider_settings,
                client,
                ResultCache(provider_settings.cache_ttl, max_entries=settings.cache_max_entries),
                token_cache=token_cache,
            )
        )
    return providers


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    catalog = load_catalog(settings.catalog_seed_path or None)

    async with httpx.AsyncClient(timeout=30.0) as client:
        credentials = {
            name: OAuthCredentials(p.token_url, p.client_id, p.client_secret)
            for name, p in settings.providers().items()
            if p.enabled and p.uses_oauth
        }
        token_cache = TokenCache(
            client,
            credentials,
            safety_margin=settings.token_safety_margin,
            timeout=settings.token_timeout,
        )
        providers = build_providers(settings, client, token_cache)

        app.state.settings = settings
        app.state.catalog_store = catalog
        app.state.aggregation_service = AggregationService(
            catalog,
            providers,
            mock_generator=MockOfferGenerator(),
            deadline=settings.search_deadline,
        )

        sweeper = asyncio.create_task(
            _sweep_caches([p.cache for p in providers], settings.cache_sweep_interval)
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper


app = FastAPI(title="Tripease", lifespan=lifespan)

app.add_exception_handler(CatalogError, catalog_error_handler)

app.include_router(search_router)
app.include_router(trips_router)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
