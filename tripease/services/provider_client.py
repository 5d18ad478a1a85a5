import logging
from dataclasses import dataclass
from typing import Any

import httpx

from tripease.config import ProviderSettings
from tripease.exceptions.custom import (
    AuthFailure,
    ProviderAuthError,
    ProviderError,
    RateLimitError,
)
from tripease.mappers.payload_extractor import extract_records
from tripease.mappers.query_params import build_params
from tripease.schemas.offer import OfferKind, copy_record
from tripease.schemas.search import SearchQuery
from tripease.services.result_cache import ResultCache, make_key
from tripease.services.token_cache import TokenCache

logger = logging.getLogger(__name__)


def _bearer(headers: dict[str, str]) -> str | None:
    value = headers.get("Authorization", "")
    return value.removeprefix("Bearer ") if value.startswith("Bearer ") else None


@dataclass(frozen=True)
class ProviderResult:
    records: list[dict]
    cached: bool = False


class ProviderClient:
    """One external travel-data source.

    ``search`` returns the raw record dicts found in the provider's response,
    served from the result cache when possible. Every failure is raised as
    :class:`ProviderError` so callers can isolate it.
    """

    def __init__(
        self,
        name: str,
        kind: OfferKind,
        settings: ProviderSettings,
        client: httpx.AsyncClient,
        cache: ResultCache,
        token_cache: TokenCache | None = None,
    ):
        self.name = name
        self.kind = kind
        self._settings = settings
        self._client = client
        self._cache = cache
        self._token_cache = token_cache

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def results_key(self) -> str:
        return self._settings.results_key or self.name

    async def search(self, query: SearchQuery) -> list[dict]:
        return (await self.fetch(query)).records

    async def fetch(self, query: SearchQuery) -> ProviderResult:
        key = make_key(self.name, query)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return ProviderResult(records=[copy_record(r) for r in cached], cached=True)

        body = await self._request(build_params(query, self.kind))
        records = extract_records(body, self.results_key)
        self._cache.put(key, tuple(copy_record(r) for r in records))
        logger.info("%s returned %d records", self.name, len(records))
        return ProviderResult(records=records)

    async def _auth_headers(self) -> dict[str, str]:
        if self._settings.uses_oauth:
            if self._token_cache is None:
                raise ProviderAuthError(self.name, "no token cache for OAuth provider")
            try:
                token = await self._token_cache.get_token(self.name)
            except AuthFailure as exc:
                raise ProviderAuthError(self.name, exc.message) from exc
            return {"Authorization": f"Bearer {token.value}"}
        if self._settings.api_key and not self._settings.api_key_param:
            return {"Authorization": f"Bearer {self._settings.api_key}"}
        return {}

    def _key_params(self) -> dict[str, str]:
        if self._settings.api_key and self._settings.api_key_param:
            return {self._settings.api_key_param: self._settings.api_key}
        return {}

    async def _request(self, params: dict[str, Any]) -> Any:
        headers = await self._auth_headers()
        resp = await self._send(params, headers)
        if resp.status_code == 401 and self._settings.uses_oauth and self._token_cache:
            logger.info("%s rejected the bearer token, refreshing once", self.name)
            self._token_cache.invalidate(self.name, _bearer(headers))
            resp = await self._send(params, await self._auth_headers())

        if resp.status_code == 429:
            raise RateLimitError(self.name)
        if not resp.is_success:
            detail = resp.text[:200] or resp.reason_phrase
            raise ProviderError(self.name, detail, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(
                self.name, "response body is not valid JSON", status_code=resp.status_code
            ) from exc

    async def _send(self, params: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        timeout = self._settings.timeout
        try:
            if self._settings.method == "POST":
                return await self._client.post(
                    self._settings.url,
                    params=self._key_params(),
                    json=params,
                    headers=headers,
                    timeout=timeout,
                )
            return await self._client.get(
                self._settings.url,
                params={**params, **self._key_params()},
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            raise ProviderError(self.name, f"timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc
