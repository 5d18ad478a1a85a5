import copy
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, Field, PlainSerializer, field_validator

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/800x600?text=No+Image"
DEFAULT_RATING = 5.0
MAX_RATING = 5.0


class OfferKind(StrEnum):
    destination = "destination"
    hotel = "hotel"
    bus = "bus"
    train = "train"
    flight = "flight"


TRANSPORT_KINDS = frozenset({OfferKind.bus, OfferKind.train, OfferKind.flight})

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def clamp_rating(value: Any) -> float:
    """Parse a rating into [0, 5]; anything unparsable becomes the default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_RATING
    try:
        rating = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_RATING
    if rating != rating:  # NaN
        return DEFAULT_RATING
    return min(max(rating, 0.0), MAX_RATING)


def copy_record(record: dict[str, Any]) -> dict[str, Any]:
    """Deep copy of a provider record.

    Records nested deeper than the recursion limit get a shallow copy instead.
    """
    try:
        return copy.deepcopy(record)
    except RecursionError:
        return dict(record)


class Price(BaseModel):
    model_config = {"frozen": True}

    amount: Amount = Field(ge=0)
    currency: str = "USD"

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper() or "USD"


class Offer(BaseModel):
    """Canonical search result, whichever source produced it."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str = Field(min_length=1)
    kind: OfferKind
    title: str = Field(min_length=1)
    origin: str | None = None
    destination: str | None = None
    departs_at: str | None = Field(default=None, alias="whenDeparts")
    arrives_at: str | None = Field(default=None, alias="whenArrives")
    duration: str | None = None
    price: Price | None = None
    rating: float = DEFAULT_RATING
    image_url: str = Field(default=PLACEHOLDER_IMAGE_URL, alias="imageUrl")
    capacity_remaining: int | None = Field(default=None, ge=0, alias="capacityRemaining")
    description: str | None = None
    category: str | None = None
    source_provider: str = Field(min_length=1, alias="sourceProvider")
    raw: dict[str, Any] = Field(default_factory=dict)

    @field_validator("rating", mode="before")
    @classmethod
    def _clamp_rating(cls, value: Any) -> float:
        return clamp_rating(value)

    @field_validator("image_url", mode="before")
    @classmethod
    def _image_or_placeholder(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            return PLACEHOLDER_IMAGE_URL
        return value

    @field_validator("raw", mode="before")
    @classmethod
    def _detach_raw(cls, value: Any) -> dict[str, Any]:
        if not isinstance(value, dict):
            return {}
        return copy_record(value)
