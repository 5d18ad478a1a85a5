"""Map loosely-typed provider records onto :class:`Offer`.

Each target field has an ordered tuple of source paths. A path is a sequence
of dict keys and list indexes. The first path whose value survives the field's
coercion wins. A missing field never fails normalization; it falls back to a
default. Supporting a new provider shape means adding paths here.
"""

import hashlib
import math
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from typing import Any

from tripease.schemas.offer import (
    DEFAULT_RATING,
    Offer,
    OfferKind,
    Price,
    clamp_rating,
)

Path = tuple[str | int, ...]

KIND_BY_PROVIDER: dict[str, OfferKind] = {
    "destinations": OfferKind.destination,
    "hotels": OfferKind.hotel,
    "buses": OfferKind.bus,
    "trains": OfferKind.train,
    "flights": OfferKind.flight,
}

DEFAULT_TITLES: dict[OfferKind, str] = {
    OfferKind.destination: "Destination",
    OfferKind.hotel: "Hotel",
    OfferKind.bus: "Bus Operator",
    OfferKind.train: "Train",
    OfferKind.flight: "Flight",
}

DEFAULT_CURRENCIES: dict[OfferKind, str] = {
    OfferKind.bus: "INR",
    OfferKind.train: "INR",
}
FALLBACK_CURRENCY = "USD"

KIND_TITLE_FALLBACKS: dict[OfferKind, tuple[Path, ...]] = {
    OfferKind.destination: (("city",), ("destination",)),
    OfferKind.hotel: (("property", "name"),),
    OfferKind.bus: (("operator",), ("operatorName",), ("company",)),
    OfferKind.train: (("trainName",), ("train_name",), ("trainNumber",)),
    OfferKind.flight: (("airline_name",), ("carrier",), ("airline",)),
}


def _text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _amount(value: Any) -> Decimal | None:
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        return None
    try:
        amount = Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _count(value: Any) -> int | None:
    number = _number(value)
    if number is None:
        return None
    return max(int(number), 0)


def _currency(value: Any) -> str | None:
    text = _text(value)
    if text is None or not text.isalpha() or len(text) != 3:
        return None
    return text.upper()


FIELD_RULES: dict[str, tuple[tuple[Path, ...], Callable[[Any], Any]]] = {
    "id": (
        (("id",), ("_id",), ("hotel_id",), ("property_id",), ("bus_id",),
         ("trip_id",), ("train_number",), ("location_id",), ("code",)),
        _text,
    ),
    "title": ((("name",), ("title",), ("hotel_name",), ("property_name",)), _text),
    "origin": (
        (("origin",), ("source",), ("from",), ("fromCity",), ("departureCity",),
         ("origin_airport",)),
        _text,
    ),
    "destination": (
        (("destination",), ("to",), ("toCity",), ("arrivalCity",),
         ("destination_airport",), ("city",), ("location", "city"), ("address", "city")),
        _text,
    ),
    "departs_at": (
        (("departureTime",), ("departure_time",), ("departure",), ("start_time",),
         ("startDate",)),
        _text,
    ),
    "arrives_at": (
        (("arrivalTime",), ("arrival_time",), ("arrival",), ("end_time",), ("endDate",)),
        _text,
    ),
    "duration": ((("duration",), ("journeyTime",)), _text),
    "amount": (
        (("price", "total"), ("price", "amount"), ("price",), ("fare", "total"),
         ("fare", "amount"), ("fare",), ("rate",)),
        _amount,
    ),
    "currency": ((("currency",), ("price", "currency"), ("fare", "currency")), _currency),
    "rating": ((("rating",), ("stars",), ("review_score",)), _number),
    "image_url": (
        (("imageUrl",), ("image",), ("images", 0, "url"), ("images", 0),
         ("photos", 0, "url"), ("photoUrl",)),
        _text,
    ),
    "capacity_remaining": (
        (("availableSeats",), ("seats_remaining",), ("seatsAvailable",), ("seats",),
         ("rooms_available",)),
        _count,
    ),
    "description": (
        (("description",), ("summary",), ("short_description",), ("desc",)),
        _text,
    ),
    "category": ((("category",), ("category", "name"), ("type",)), _text),
}


def _resolve(raw: dict, path: Path) -> Any:
    node: Any = raw
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                return None
            node = node[step]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(step)
        if node is None:
            return None
    return node


def first_value(raw: dict, paths: tuple[Path, ...], coerce: Callable[[Any], Any]) -> Any:
    for path in paths:
        value = coerce(_resolve(raw, path))
        if value is not None:
            return value
    return None


def _field(raw: dict, name: str) -> Any:
    paths, coerce = FIELD_RULES[name]
    return first_value(raw, paths, coerce)


def synthesize_id(provider_tag: str, title: str, departs: str | None, arrives: str | None) -> str:
    seed = "|".join((provider_tag, title, departs or "", arrives or ""))
    return f"{provider_tag}-{hashlib.sha1(seed.encode()).hexdigest()[:12]}"


def normalize(raw: Any, provider_tag: str, kind: OfferKind | None = None) -> Offer:
    """Build an Offer from one provider record. Never raises on bad data."""
    if not isinstance(raw, dict):
        raw = {}
    provider_tag = provider_tag or "unknown"
    if kind is None:
        kind = KIND_BY_PROVIDER.get(provider_tag, OfferKind.destination)

    title = (
        _field(raw, "title")
        or first_value(raw, KIND_TITLE_FALLBACKS.get(kind, ()), _text)
        or DEFAULT_TITLES[kind]
    )
    departs = _field(raw, "departs_at")
    arrives = _field(raw, "arrives_at")

    amount = _field(raw, "amount")
    price = None
    if amount is not None:
        currency = _field(raw, "currency") or DEFAULT_CURRENCIES.get(kind, FALLBACK_CURRENCY)
        price = Price(amount=amount, currency=currency)

    rating = _field(raw, "rating")

    return Offer(
        id=_field(raw, "id") or synthesize_id(provider_tag, title, departs, arrives),
        kind=kind,
        title=title,
        origin=_field(raw, "origin"),
        destination=_field(raw, "destination"),
        departs_at=departs,
        arrives_at=arrives,
        duration=_field(raw, "duration"),
        price=price,
        rating=clamp_rating(rating) if rating is not None else DEFAULT_RATING,
        image_url=_field(raw, "image_url"),
        capacity_remaining=_field(raw, "capacity_remaining"),
        description=_field(raw, "description"),
        category=_field(raw, "category"),
        source_provider=provider_tag,
        raw=raw,
    )
