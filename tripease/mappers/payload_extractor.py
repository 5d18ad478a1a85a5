"""Locate the list of result records inside a provider response body.

Providers wrap their results differently: a bare array, ``{"data": [...]}``,
``{"results": [...]}``, a provider-named key such as ``{"hotels": [...]}``,
or some other key. Strategies are tried in order and the first one that finds
a list wins.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

COMMON_KEYS = ("data", "results")


class ExtractionStrategy(Protocol):
    def __call__(self, body: Any) -> list | None: ...


class RootArray:
    def __call__(self, body: Any) -> list | None:
        return body if isinstance(body, list) else None


class KnownKeys:
    def __init__(self, keys: tuple[str, ...]) -> None:
        self.keys = keys

    def __call__(self, body: Any) -> list | None:
        if not isinstance(body, dict):
            return None
        for key in self.keys:
            value = body.get(key)
            if isinstance(value, list):
                return value
        return None


class FirstArrayProperty:
    def __call__(self, body: Any) -> list | None:
        if not isinstance(body, dict):
            return None
        return next((v for v in body.values() if isinstance(v, list)), None)


def default_chain(provider_key: str | None = None) -> tuple[ExtractionStrategy, ...]:
    keys = COMMON_KEYS + ((provider_key,) if provider_key else ())
    return (RootArray(), KnownKeys(keys), FirstArrayProperty())


def extract_records(
    body: Any,
    provider_key: str | None = None,
    chain: tuple[ExtractionStrategy, ...] | None = None,
) -> list[dict]:
    """Return the record objects found in ``body``; ``[]`` when there are none."""
    for strategy in chain or default_chain(provider_key):
        items = strategy(body)
        if items is None:
            continue
        records = [item for item in items if isinstance(item, dict)]
        if len(records) != len(items):
            logger.debug("Dropped %d non-object items", len(items) - len(records))
        return records
    return []
