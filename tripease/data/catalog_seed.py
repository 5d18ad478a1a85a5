"""Curated catalog loaded into the local store at startup."""

CATALOG_SEED: list[dict] = [
    {
        "id": "trip-goa-beach",
        "name": "Goa Beach Escape",
        "kind": "destination",
        "destination": "Goa",
        "category": "Beach",
        "description": "Golden beaches, nightlife, adventure water sports.",
        "tags": ["beach", "nightlife", "popular"],
        "rating": 5,
        "image_url": "https://source.unsplash.com/featured/?goa",
        "price": "249.00",
        "currency": "USD",
        "created_at": "2025-01-10T09:00:00Z",
    },
    {
        "id": "trip-himalayan-trek",
        "name": "Himalayan Trek Adventure",
        "kind": "destination",
        "destination": "Himalayas",
        "category": "Mountain",
        "description": "Snow-capped mountains and scenic trekking routes.",
        "tags": ["trek", "adventure", "popular"],
        "rating": 5,
        "image_url": "https://source.unsplash.com/featured/?himalaya",
        "price": "499.00",
        "currency": "USD",
        "created_at": "2025-01-12T09:00:00Z",
    },
    {
        "id": "trip-rajasthan-royal",
        "name": "Rajasthan Royal Tour",
        "kind": "destination",
        "destination": "Jaipur",
        "category": "Cultural",
        "description": "Fortresses, palaces, camels, and deserts.",
        "tags": ["heritage", "desert"],
        "rating": 4,
        "image_url": "https://source.unsplash.com/featured/?rajasthan",
        "price": "399.00",
        "currency": "USD",
        "created_at": "2025-01-15T09:00:00Z",
    },
    {
        "id": "train-rajdhani-del-bom",
        "name": "Rajdhani Express",
        "kind": "train",
        "origin": "Delhi",
        "destination": "Mumbai",
        "category": "Train",
        "description": "Overnight AC sleeper between Delhi and Mumbai.",
        "tags": ["overnight"],
        "rating": 4,
        "price": "2450.00",
        "currency": "INR",
        "departs_at": "16:55",
        "seats": 42,
        "created_at": "2025-02-01T09:00:00Z",
    },
]
