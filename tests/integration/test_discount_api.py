"""Integration tests for owner discounts."""

import pytest
from services.storefront_service.models import DiscountType
from tests.factories import DiscountFactory, auth_headers, seed_owner_with_store


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_code_discount(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/discounts",
        json={"type": "code", "title": "Весна", "code": "spring15", "value": 15},
        headers=auth_headers(user),
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["code"] == "SPRING15"
    assert data["typeLabel"]
    assert data["valueLabel"] == "15%"
    assert data["usageCount"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_code_discount_needs_code(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/discounts",
        json={"type": "code", "title": "Без кода", "value": 10},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Укажите промокод"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_duplicate_code_in_same_store(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    db_session.add(
        DiscountFactory.create(store_id=store.id, type=DiscountType.CODE, code="HELLO")
    )
    await db_session.commit()

    response = await client.post(
        "/api/my-store/discounts",
        json={"type": "code", "title": "Снова", "code": "hello", "value": 5},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Такой промокод уже существует"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_same_code_in_another_store_is_fine(client, db_session):
    _, other = await seed_owner_with_store(db_session)
    db_session.add(
        DiscountFactory.create(store_id=other.id, type=DiscountType.CODE, code="HELLO")
    )
    await db_session.commit()
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/discounts",
        json={"type": "code", "title": "Привет", "code": "HELLO", "value": 5},
        headers=auth_headers(user),
    )

    assert response.status_code == 201, response.text


@pytest.mark.asyncio
@pytest.mark.integration
async def test_end_before_start_is_rejected(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/discounts",
        json={
            "type": "automatic",
            "title": "Неделя",
            "value": 10,
            "startDate": "2026-05-10T00:00:00Z",
            "endDate": "2026-05-01T00:00:00Z",
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Дата окончания раньше даты начала"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_free_delivery_is_stored_as_free(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/my-store/discounts",
        json={
            "type": "free_delivery",
            "title": "Доставка бесплатно",
            "valueType": "percentage",
            "value": 50,
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 201, response.text
    assert response.json()["valueType"] == "free"
    assert response.json()["valueLabel"] == "Бесплатно"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_discount(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    discount = DiscountFactory.create(store_id=store.id, title="Старое")
    db_session.add(discount)
    await db_session.commit()
    headers = auth_headers(user)

    updated = await client.patch(
        f"/api/my-store/discounts/{discount.id}",
        json={"title": "Новое", "value": 25, "isActive": False},
        headers=headers,
    )
    assert updated.status_code == 200, updated.text
    assert updated.json()["title"] == "Новое"
    assert updated.json()["valueLabel"] == "25%"
    assert updated.json()["isActive"] is False
    assert updated.json()["type"] == "automatic"

    deleted = await client.delete(f"/api/my-store/discounts/{discount.id}", headers=headers)
    assert deleted.json() == {"ok": True}

    gone = await client.get(f"/api/my-store/discounts/{discount.id}", headers=headers)
    assert gone.status_code == 404
    assert gone.json()["detail"] == "Скидка не найдена"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_discounts_only_own(client, db_session):
    _, other = await seed_owner_with_store(db_session)
    user, store = await seed_owner_with_store(db_session)
    db_session.add_all(
        [
            DiscountFactory.create(store_id=store.id, title="Моя"),
            DiscountFactory.create(store_id=other.id, title="Чужая"),
        ]
    )
    await db_session.commit()

    response = await client.get("/api/my-store/discounts", headers=auth_headers(user))

    assert [d["title"] for d in response.json()] == ["Моя"]
