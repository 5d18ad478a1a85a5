import asyncio
import logging
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from httpx import Response

from tripease.exceptions.custom import AuthFailure
from tripease.services.token_cache import OAuthCredentials, TokenCache

TOKEN_URL = "https://auth.flights.test/oauth2/token"
CREDS = {"flights": OAuthCredentials(TOKEN_URL, "client-id", "client-secret")}


def _token_response(token="tok-1", expires_in=120):
    return Response(200, json={"access_token": token, "expires_in": expires_in, "token_type": "Bearer"})


@respx.mock
async def test_first_call_exchanges_credentials(clock):
    route = respx.post(TOKEN_URL).mock(return_value=_token_response())

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, safety_margin=60, clock=clock)
        token = await cache.get_token("flights")

    assert token.value == "tok-1"
    assert token.expires_at == clock.now + 120 - 60
    body = parse_qs(route.calls.last.request.content.decode())
    assert body == {
        "grant_type": ["client_credentials"],
        "client_id": ["client-id"],
        "client_secret": ["client-secret"],
    }


@respx.mock
async def test_valid_token_served_without_io(clock):
    route = respx.post(TOKEN_URL).mock(return_value=_token_response())

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        first = await cache.get_token("flights")
        clock.advance(30)
        second = await cache.get_token("flights")

    assert first is second
    assert route.call_count == 1


@respx.mock
async def test_concurrent_callers_share_one_exchange(clock):
    route = respx.post(TOKEN_URL).mock(return_value=_token_response())

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        tokens = await asyncio.gather(*(cache.get_token("flights") for _ in range(10)))

    assert route.call_count == 1
    assert {t.value for t in tokens} == {"tok-1"}


@respx.mock
async def test_exchanges_follow_expiry_boundaries(clock):
    route = respx.post(TOKEN_URL).mock(
        side_effect=[_token_response("tok-1"), _token_response("tok-2"), _token_response("tok-3")]
    )

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, safety_margin=60, clock=clock)
        # expires_in=120 with a 60s margin: refresh every 60s
        values = []
        for step in (0, 20, 20, 21, 30, 30):
            clock.advance(step)
            values.append((await cache.get_token("flights")).value)

    assert values == ["tok-1", "tok-1", "tok-1", "tok-2", "tok-2", "tok-3"]
    assert route.call_count == 3


@respx.mock
async def test_failed_exchange_raises_and_caches_nothing(clock):
    route = respx.post(TOKEN_URL).mock(
        side_effect=[Response(500, text="boom"), _token_response("tok-ok")]
    )

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        with pytest.raises(AuthFailure) as exc_info:
            await cache.get_token("flights")
        assert not exc_info.value.permanent

        token = await cache.get_token("flights")

    assert token.value == "tok-ok"
    assert route.call_count == 2


@respx.mock
async def test_concurrent_callers_share_a_failure(clock):
    route = respx.post(TOKEN_URL).mock(return_value=Response(503))

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        results = await asyncio.gather(
            *(cache.get_token("flights") for _ in range(5)), return_exceptions=True
        )

    assert all(isinstance(r, AuthFailure) for r in results)
    assert route.call_count == 1


@respx.mock
async def test_malformed_token_body(clock):
    respx.post(TOKEN_URL).mock(return_value=Response(200, json={"token_type": "Bearer"}))

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        with pytest.raises(AuthFailure, match="access_token"):
            await cache.get_token("flights")


@respx.mock
async def test_non_json_token_body(clock):
    respx.post(TOKEN_URL).mock(return_value=Response(200, text="<html>oops</html>"))

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        with pytest.raises(AuthFailure, match="not JSON"):
            await cache.get_token("flights")


@respx.mock
async def test_network_error_is_auth_failure(clock):
    respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("refused"))

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        with pytest.raises(AuthFailure):
            await cache.get_token("flights")


async def test_missing_credentials_is_permanent_and_logged_once(clock, caplog):
    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, {}, clock=clock)
        with caplog.at_level(logging.WARNING, logger="tripease.services.token_cache"):
            for _ in range(3):
                with pytest.raises(AuthFailure) as exc_info:
                    await cache.get_token("hotels")
                assert exc_info.value.permanent

    warnings = [r for r in caplog.records if "No OAuth credentials" in r.getMessage()]
    assert len(warnings) == 1


@respx.mock
async def test_invalidate_forces_refresh(clock):
    route = respx.post(TOKEN_URL).mock(
        side_effect=[_token_response("tok-1"), _token_response("tok-2")]
    )

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        await cache.get_token("flights")
        cache.invalidate("flights")
        token = await cache.get_token("flights")

    assert token.value == "tok-2"
    assert route.call_count == 2


@respx.mock
async def test_redirect_from_token_endpoint_is_auth_failure(clock):
    respx.post(TOKEN_URL).mock(
        return_value=Response(302, json={"access_token": "tok-1"}, headers={"Location": "/login"})
    )

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        with pytest.raises(AuthFailure, match="302"):
            await cache.get_token("flights")


@respx.mock
async def test_invalidate_keeps_token_already_refreshed(clock):
    route = respx.post(TOKEN_URL).mock(
        side_effect=[_token_response("tok-1"), _token_response("tok-2")]
    )

    async with httpx.AsyncClient() as client:
        cache = TokenCache(client, CREDS, clock=clock)
        await cache.get_token("flights")
        cache.invalidate("flights", "tok-1")
        refreshed = await cache.get_token("flights")
        cache.invalidate("flights", "tok-1")
        token = await cache.get_token("flights")

    assert refreshed.value == "tok-2"
    assert token.value == "tok-2"
    assert route.call_count == 2
