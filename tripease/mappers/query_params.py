from typing import Any

from tripease.schemas.offer import OfferKind
from tripease.schemas.search import SearchQuery

# SearchQuery field -> provider parameter name, per kind of provider.
# Fields a provider does not understand are left out of its request.
PARAM_NAMES: dict[OfferKind, dict[str, str]] = {
    OfferKind.destination: {"keyword": "keyword", "destination": "keyword", "category": "category"},
    OfferKind.hotel: {"destination": "location", "keyword": "location", "date": "checkin", "guests": "guests"},
    OfferKind.bus: {"origin": "source", "destination": "destination", "date": "date", "guests": "seats"},
    OfferKind.train: {"origin": "from", "destination": "to", "date": "date"},
    OfferKind.flight: {
        "origin": "originLocationCode",
        "destination": "destinationLocationCode",
        "date": "departureDate",
        "guests": "adults",
    },
}


def build_params(query: SearchQuery, kind: OfferKind) -> dict[str, Any]:
    """Translate a query into one provider's request parameters.

    When two query fields map to the same parameter, the first one set wins.
    """
    params: dict[str, Any] = {}
    for field, param in PARAM_NAMES[kind].items():
        value = getattr(query, field)
        if value is not None and param not in params:
            params[param] = value
    return params
