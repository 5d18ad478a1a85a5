from typing import Any

from pydantic import BaseModel, Field, field_validator

from tripease.schemas.offer import OfferKind

_TEXT_FIELDS = ("keyword", "origin", "destination", "date", "category")


class SearchQuery(BaseModel):
    """Immutable search request shared by the catalog, providers and cache keys."""

    model_config = {"frozen": True}

    keyword: str | None = None
    origin: str | None = None
    destination: str | None = None
    date: str | None = None
    category: str | None = None
    guests: int | None = Field(default=None, ge=1)
    kinds: frozenset[OfferKind] = frozenset()

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def has_free_text(self) -> bool:
        return self.keyword is not None

    def wants(self, kind: OfferKind) -> bool:
        return not self.kinds or kind in self.kinds

    def signature(self) -> str:
        """Canonical key=value form, independent of field order and case."""
        pairs: list[tuple[str, str]] = []
        for name in _TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                pairs.append((name, value.lower()))
        if self.guests is not None:
            pairs.append(("guests", str(self.guests)))
        if self.kinds:
            pairs.append(("kinds", ",".join(sorted(k.value for k in self.kinds))))
        return "&".join(f"{k}={v}" for k, v in sorted(pairs))
