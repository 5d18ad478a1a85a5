async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_list_trips_newest_first(client):
    resp = await client.get("/api/trips")

    assert resp.status_code == 200
    body = resp.json()
    assert [t["id"] for t in body["data"]] == [
        "train-rajdhani-del-bom",
        "trip-rajasthan-royal",
        "trip-himalayan-trek",
        "trip-goa-beach",
    ]
    assert body["meta"] == {"total": 4, "page": 1, "pages": 1, "limit": 20}
    assert all(t["sourceProvider"] == "local" for t in body["data"])


async def test_list_trips_keyword_and_category(client):
    resp = await client.get("/api/trips", params={"q": "goa"})
    assert [t["id"] for t in resp.json()["data"]] == ["trip-goa-beach"]

    resp = await client.get("/api/trips", params={"category": "mountain"})
    assert [t["id"] for t in resp.json()["data"]] == ["trip-himalayan-trek"]


async def test_list_trips_pagination(client):
    resp = await client.get("/api/trips", params={"page": 2, "limit": 2})

    body = resp.json()
    assert [t["id"] for t in body["data"]] == ["trip-himalayan-trek", "trip-goa-beach"]
    assert body["meta"] == {"total": 4, "page": 2, "pages": 2, "limit": 2}


async def test_list_trips_sorted_by_name(client):
    resp = await client.get("/api/trips", params={"sort": "name"})

    titles = [t["title"] for t in resp.json()["data"]]
    assert titles == sorted(titles)


async def test_list_trips_rejects_large_limit(client):
    resp = await client.get("/api/trips", params={"limit": 500})
    assert resp.status_code == 422


async def test_get_trip(client):
    resp = await client.get("/api/trips/trip-goa-beach")

    assert resp.status_code == 200
    trip = resp.json()
    assert trip["title"] == "Goa Beach Escape"
    assert trip["destination"] == "Goa"
    assert trip["price"] == {"amount": 249.0, "currency": "USD"}
    assert trip["imageUrl"].startswith("https://")
    assert trip["sourceProvider"] == "local"


async def test_get_trip_without_image_uses_placeholder(client):
    resp = await client.get("/api/trips/train-rajdhani-del-bom")

    trip = resp.json()
    assert trip["imageUrl"] == "https://via.placeholder.com/800x600?text=No+Image"
    assert trip["capacityRemaining"] == 42
    assert trip["whenDeparts"] == "16:55"


async def test_get_missing_trip(client):
    resp = await client.get("/api/trips/nope")

    assert resp.status_code == 404
    assert resp.json() == {"detail": "Trip not found"}
