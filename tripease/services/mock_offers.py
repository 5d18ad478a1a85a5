"""Deterministic stand-in offers for when no provider can answer."""

import hashlib
import random
from decimal import Decimal

from tripease.schemas.offer import TRANSPORT_KINDS, Offer, OfferKind, Price
from tripease.schemas.search import SearchQuery

MOCK_SOURCE = "mock"
MOCK_CURRENCY = "USD"

CARRIERS: dict[OfferKind, tuple[str, ...]] = {
    OfferKind.flight: ("IndiGo", "Air India", "Vistara", "SpiceJet", "Akasa Air"),
    OfferKind.bus: ("RedLine Travels", "VRL Travels", "Orange Tours", "SRS Travels"),
    OfferKind.train: ("Rajdhani Express", "Shatabdi Express", "Duronto Express", "Vande Bharat"),
}

# (min minutes, max minutes, min price, max price)
PROFILES: dict[OfferKind, tuple[int, int, int, int]] = {
    OfferKind.flight: (70, 360, 90, 650),
    OfferKind.bus: (180, 720, 12, 80),
    OfferKind.train: (240, 960, 20, 160),
}


def _seed(query: SearchQuery) -> int:
    parts = (
        query.origin or "",
        query.destination or "",
        query.date or "",
        query.keyword or "",
        ",".join(sorted(k.value for k in query.kinds)),
    )
    return int(hashlib.md5("|".join(parts).lower().encode()).hexdigest()[:8], 16)


def _mock_kind(query: SearchQuery) -> OfferKind:
    transport = [k for k in query.kinds if k in TRANSPORT_KINDS]
    return transport[0] if len(transport) == 1 else OfferKind.flight


def _clock(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class MockOfferGenerator:
    def __init__(self, min_offers: int = 3, max_offers: int = 5) -> None:
        self.min_offers = min_offers
        self.max_offers = max_offers

    def generate(self, query: SearchQuery) -> list[Offer]:
        """Same query in, same offers out."""
        seed = _seed(query)
        rng = random.Random(seed)
        kind = _mock_kind(query)
        carriers = CARRIERS[kind]
        min_dur, max_dur, min_price, max_price = PROFILES[kind]
        origin = query.origin or "Anywhere"
        destination = query.destination or query.keyword or "Anywhere"

        offers = []
        for n in range(rng.randint(self.min_offers, self.max_offers)):
            carrier = rng.choice(carriers)
            departs = rng.randint(5 * 4, 22 * 4 + 3) * 15
            duration = rng.randint(min_dur // 5, max_dur // 5) * 5
            amount = Decimal(str(round(rng.uniform(min_price, max_price), 2)))
            raw = {
                "carrier": carrier,
                "date": query.date,
                "seed": seed,
            }
            offers.append(
                Offer(
                    id=f"mock-{seed:08x}-{n}",
                    kind=kind,
                    title=f"{carrier} {origin} to {destination}",
                    origin=origin,
                    destination=destination,
                    departs_at=_clock(departs),
                    arrives_at=_clock(departs + duration),
                    duration=f"{duration // 60}h {duration % 60:02d}m",
                    price=Price(amount=amount, currency=MOCK_CURRENCY),
                    rating=round(rng.uniform(3.5, 5.0), 1),
                    capacity_remaining=rng.randint(1, 40),
                    source_provider=MOCK_SOURCE,
                    raw=raw,
                )
            )
        return sorted(offers, key=lambda o: (o.price.amount, o.id))
