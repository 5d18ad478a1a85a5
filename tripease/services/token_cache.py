import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from tripease.exceptions.custom import AuthFailure

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 1799


@dataclass(frozen=True)
class OAuthCredentials:
    token_url: str
    client_id: str
    client_secret: str

    @property
    def complete(self) -> bool:
        return bool(self.token_url and self.client_id and self.client_secret)


@dataclass(frozen=True)
class ProviderToken:
    value: str
    expires_at: float


class TokenCache:
    """OAuth2 client-credentials tokens, one per provider.

    A cached token is served without I/O until ``expires_at``, which already
    has the safety margin taken off. Refreshes are single-flight: concurrent
    callers share one in-flight exchange and its outcome.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: dict[str, OAuthCredentials],
        safety_margin: float = 60.0,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._safety_margin = safety_margin
        self._timeout = timeout
        self._clock = clock
        self._tokens: dict[str, ProviderToken] = {}
        self._inflight: dict[str, asyncio.Task[ProviderToken]] = {}
        self._reported_missing: set[str] = set()

    async def get_token(self, provider_id: str) -> ProviderToken:
        token = self._tokens.get(provider_id)
        if token is not None and self._clock() < token.expires_at:
            return token

        creds = self._credentials.get(provider_id)
        if creds is None or not creds.complete:
            if provider_id not in self._reported_missing:
                self._reported_missing.add(provider_id)
                logger.warning("No OAuth credentials configured for %s", provider_id)
            raise AuthFailure(provider_id, "credentials not configured", permanent=True)

        task = self._inflight.get(provider_id)
        if task is None:
            task = asyncio.create_task(self._refresh(provider_id, creds))
            self._inflight[provider_id] = task
            task.add_done_callback(lambda t: self._forget(provider_id, t))
        return await asyncio.shield(task)

    def invalidate(self, provider_id: str, rejected: str | None = None) -> None:
        """Drop the cached token. With ``rejected``, only while it still has that value."""
        token = self._tokens.get(provider_id)
        if token is None:
            return
        if rejected is None or token.value == rejected:
            del self._tokens[provider_id]

    def _forget(self, provider_id: str, task: asyncio.Task[ProviderToken]) -> None:
        if self._inflight.get(provider_id) is task:
            del self._inflight[provider_id]
        if not task.cancelled():
            # Mark the exception retrieved when every waiter has gone away
            task.exception()

    async def _refresh(self, provider_id: str, creds: OAuthCredentials) -> ProviderToken:
        try:
            resp = await self._client.post(
                creds.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": creds.client_id,
                    "client_secret": creds.client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            logger.warning("Token exchange for %s timed out", provider_id)
            raise AuthFailure(provider_id, "token exchange timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Token exchange for %s failed: %s", provider_id, exc)
            raise AuthFailure(provider_id, f"token exchange failed: {exc}") from exc

        if not resp.is_success:
            logger.warning("Token exchange for %s returned %d", provider_id, resp.status_code)
            raise AuthFailure(provider_id, f"token endpoint returned {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthFailure(provider_id, "token response is not JSON") from exc

        value = data.get("access_token") if isinstance(data, dict) else None
        if not isinstance(value, str) or not value:
            raise AuthFailure(provider_id, "token response has no access_token")

        try:
            expires_in = float(data.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        token = ProviderToken(
            value=value,
            expires_at=self._clock() + expires_in - self._safety_margin,
        )
        self._tokens[provider_id] = token
        logger.info("Token refreshed for %s", provider_id)
        return token
