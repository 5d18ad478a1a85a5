import json

import httpx
import pytest
from httpx import ASGITransport

DESTINATIONS_URL = "https://api.destinations.test/v1/search"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("DESTINATIONS__URL", DESTINATIONS_URL)
    monkeypatch.setenv("DESTINATIONS__API_KEY", "test-dest-key")
    monkeypatch.setenv("SEARCH_DEADLINE", "5")


@pytest.fixture
def offline_env(monkeypatch, tmp_path):
    """No providers configured and an empty local catalog."""
    seed = tmp_path / "catalog.json"
    seed.write_text(json.dumps([]), encoding="utf-8")
    monkeypatch.setenv("CATALOG_SEED_PATH", str(seed))


async def _app_client():
    from tripease.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c


@pytest.fixture
async def client(mock_env):
    async for c in _app_client():
        yield c


@pytest.fixture
async def offline_client(offline_env):
    async for c in _app_client():
        yield c
