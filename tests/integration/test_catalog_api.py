"""Integration tests for owner categories and products."""

import pytest
from services.storefront_service.models import Product
from tests.factories import (
    CategoryFactory,
    ProductFactory,
    auth_headers,
    seed_owner_with_store,
)

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_crud(client, db_session):
    user, _ = await seed_owner_with_store(db_session)
    headers = auth_headers(user)

    created = await client.post(
        "/api/my-store/categories", json={"name": "Хлеб", "sortOrder": 2}, headers=headers
    )
    assert created.status_code == 201, created.text
    category_id = created.json()["id"]

    updated = await client.patch(
        f"/api/my-store/categories/{category_id}",
        json={"name": "Свежий хлеб", "isActive": False},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Свежий хлеб"
    assert updated.json()["isActive"] is False
    assert updated.json()["sortOrder"] == 2

    listed = await client.get("/api/my-store/categories", headers=headers)
    assert [c["id"] for c in listed.json()] == [category_id]

    deleted = await client.delete(
        f"/api/my-store/categories/{category_id}", headers=headers
    )
    assert deleted.json() == {"ok": True}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_categories_are_scoped_to_owner(client, db_session):
    """One owner cannot see or edit another owner's category."""
    _, other_store = await seed_owner_with_store(db_session)
    foreign = CategoryFactory.create(store_id=other_store.id)
    db_session.add(foreign)
    await db_session.commit()
    user, _ = await seed_owner_with_store(db_session)

    response = await client.patch(
        f"/api/my-store/categories/{foreign.id}",
        json={"name": "Чужое"},
        headers=auth_headers(user),
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Категория не найдена"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deleting_category_uncategorizes_products(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    category = CategoryFactory.create(store_id=store.id)
    db_session.add(category)
    await db_session.flush()
    product = ProductFactory.create(store_id=store.id, category_id=category.id)
    db_session.add(product)
    await db_session.commit()

    response = await client.delete(
        f"/api/my-store/categories/{category.id}", headers=auth_headers(user)
    )

    assert response.status_code == 200
    db_session.expire_all()
    assert (await db_session.get(Product, product.id)).category_id is None


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_list_products(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    category = CategoryFactory.create(store_id=store.id)
    db_session.add(category)
    await db_session.commit()
    headers = auth_headers(user)

    created = await client.post(
        "/api/my-store/products",
        json={
            "name": "Самса",
            "price": 700,
            "discountPrice": 600,
            "categoryId": category.id,
            "imageUrls": ["/uploads/samsa.jpg"],
        },
        headers=headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["imageUrls"] == ["/uploads/samsa.jpg"]

    await client.post(
        "/api/my-store/products", json={"name": "Чай", "price": 300}, headers=headers
    )

    in_category = await client.get(
        f"/api/my-store/products?category_id={category.id}", headers=headers
    )
    assert [p["name"] for p in in_category.json()] == ["Самса"]
    everything = await client.get("/api/my-store/products", headers=headers)
    assert len(everything.json()) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_with_foreign_category_is_rejected(client, db_session):
    _, other_store = await seed_owner_with_store(db_session)
    foreign = CategoryFactory.create(store_id=other_store.id)
    db_session.add(foreign)
    await db_session.commit()
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/products",
        json={"name": "Самса", "price": 700, "categoryId": foreign.id},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Категория не найдена"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_negative_price_is_rejected(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/products",
        json={"name": "Самса", "price": -1},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Некорректные данные"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_product_can_clear_category(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    category = CategoryFactory.create(store_id=store.id)
    db_session.add(category)
    await db_session.flush()
    product = ProductFactory.create(store_id=store.id, category_id=category.id)
    db_session.add(product)
    await db_session.commit()

    response = await client.patch(
        f"/api/my-store/products/{product.id}",
        json={"categoryId": None, "price": 650, "name": None},
        headers=auth_headers(user),
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["categoryId"] is None
    assert data["price"] == 650
    assert data["name"] == "Лепёшка"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_product(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    product = ProductFactory.create(store_id=store.id)
    db_session.add(product)
    await db_session.commit()

    response = await client.delete(
        f"/api/my-store/products/{product.id}", headers=auth_headers(user)
    )
    missing = await client.delete(
        f"/api/my-store/products/{product.id}", headers=auth_headers(user)
    )

    assert response.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Товар не найден"
