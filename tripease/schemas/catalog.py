from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, Field

from tripease.schemas.offer import PLACEHOLDER_IMAGE_URL, Offer, OfferKind, Price

LOCAL_SOURCE = "local"


class CatalogItem(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    kind: OfferKind = OfferKind.destination
    description: str | None = None
    category: str | None = None
    destination: str | None = None
    origin: str | None = None
    city: str | None = None
    tags: list[str] = []
    rating: float = Field(default=5.0, ge=0, le=5)
    image_url: str = PLACEHOLDER_IMAGE_URL
    price: Decimal | None = Field(default=None, ge=0)
    currency: str = "USD"
    departs_at: str | None = None
    seats: int | None = Field(default=None, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def searchable_text(self) -> list[str]:
        fields = [self.name, self.description, self.destination, self.city, self.category]
        return [f for f in fields if f] + list(self.tags)

    def to_offer(self) -> Offer:
        return Offer(
            id=self.id,
            kind=self.kind,
            title=self.name,
            origin=self.origin,
            destination=self.destination or self.city,
            departs_at=self.departs_at,
            price=Price(amount=self.price, currency=self.currency) if self.price is not None else None,
            rating=self.rating,
            image_url=self.image_url,
            capacity_remaining=self.seats,
            description=self.description,
            category=self.category,
            source_provider=LOCAL_SOURCE,
            raw=self.model_dump(mode="json"),
        )


class CatalogPage(BaseModel):
    items: list[CatalogItem]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
