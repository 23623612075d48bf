import pytest


@pytest.mark.asyncio
async def test_root_endpoint_basic_response(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body.get("message") == "Storefront Catalog API"
    assert body.get("status") == "operational"


@pytest.mark.asyncio
async def test_public_config_endpoint(client):
    resp = await client.get("/api/config")
    assert resp.status_code == 200
    # maintenance flag should always be present for the frontend
    assert resp.json() == {"maintenance_mode": False}


@pytest.mark.asyncio
async def test_product_listing_paginates(client, factory):
    for i in range(15):
        await factory.product(f"Item {i:02d}")

    resp = await client.get("/api/products", params={"page": 2, "limit": 10})

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 15
    assert body["pages"] == 2
    assert len(body["items"]) == 5


@pytest.mark.asyncio
async def test_product_listing_filters_by_categories(client, db, factory):
    from app.services.category_service import CategoryService

    earrings = await factory.category("Earrings")
    silver = await factory.category("Silver")
    hoop = await factory.product("Hoop", gross="50.00", discount="40.00")
    await factory.product("Chain")
    await CategoryService.replace_product_categories(db, hoop.id, [earrings.id, silver.id])
    await db.commit()

    resp = await client.get("/api/products", params={"category_ids": f"{earrings.id},{silver.id}"})

    body = resp.json()
    assert body["total"] == 1
    item = body["items"][0]
    assert item["discount_percent"] == 20
    assert [c["title"] for c in item["categories"]] == ["Earrings", "Silver"]


@pytest.mark.asyncio
async def test_include_inactive_needs_admin(client, factory):
    await factory.product("Hidden", active=False)

    resp = await client.get("/api/products", params={"include_inactive": "true"})

    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_inactive_product_detail_is_404(client, factory):
    product = await factory.product("Hidden", active=False)

    resp = await client.get(f"/api/products/{product.id}")

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_product_detail(client, factory):
    product = await factory.product("Shown", gross="20.00")

    resp = await client.get(f"/api/products/{product.id}")

    assert resp.status_code == 200
    assert resp.json()["title"] == "Shown"


@pytest.mark.asyncio
async def test_public_stacks_skip_empty(client, factory):
    product = await factory.product("P")
    await factory.stack("Featured", 1, products=[product])
    await factory.stack("Empty", 2)

    resp = await client.get("/api/stacks")

    assert resp.status_code == 200
    body = resp.json()
    assert [s["title"] for s in body] == ["Featured"]
    assert body[0]["members"][0]["position"] == 1


@pytest.mark.asyncio
async def test_public_categories(client, factory):
    await factory.category("Gold")
    await factory.category("Old", active=False)

    resp = await client.get("/api/categories")

    assert [c["title"] for c in resp.json()] == ["Gold"]
