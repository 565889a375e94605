"""Integration tests for the superadmin console under /api/superadmin."""

from unittest.mock import AsyncMock, patch

import pytest
from services.storefront_service.models import (
    Category,
    EmailBroadcast,
    Order,
    OrderStatus,
    Product,
    Store,
    StoreSettings,
    User,
)
from services.storefront_service.services.platform_settings import (
    WABA_CONFIG_KEY,
    set_platform_setting,
)
from sqlalchemy import func, select
from tests.factories import (
    CategoryFactory,
    CustomerFactory,
    OrderFactory,
    ProductFactory,
    UserFactory,
    auth_headers,
    seed_owner_with_store,
)


@pytest.fixture
def admin_user():
    return UserFactory.create(email="admin@tapp.kz", is_super_admin=True)


async def _seed_admin(db_session, admin_user):
    db_session.add(admin_user)
    await db_session.commit()
    return auth_headers(admin_user)


async def _count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar()


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_regular_user_is_forbidden(client, db_session):
    user, _ = await seed_owner_with_store(db_session)

    response = await client.get("/api/superadmin/stores", headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["detail"] == "Доступ запрещён"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_anonymous_is_unauthorized(client):
    response = await client.get("/api/superadmin/analytics")

    assert response.status_code == 401


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_stores_with_counters(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    owner, store = await seed_owner_with_store(db_session, name="Самсахана")
    db_session.add_all(
        [
            ProductFactory.create(store_id=store.id),
            OrderFactory.create(store_id=store.id, order_number=1),
            OrderFactory.create(
                store_id=store.id, order_number=2, status=OrderStatus.CANCELLED
            ),
            CustomerFactory.create(store_id=store.id),
        ]
    )
    await db_session.commit()

    response = await client.get("/api/superadmin/stores?search=Самса", headers=headers)

    assert response.status_code == 200, response.text
    [row] = response.json()
    assert row["ownerEmail"] == owner.email
    assert row["productsCount"] == 1
    assert row["ordersCount"] == 2
    assert row["revenue"] == 1000
    assert row["customersCount"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_store_detail(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session)
    db_session.add_all(
        [
            OrderFactory.create(store_id=store.id, order_number=1),
            OrderFactory.create(
                store_id=store.id,
                order_number=2,
                items=[{"productId": 2, "name": "Торт", "quantity": 1, "price": 4000}],
            ),
        ]
    )
    await db_session.commit()

    response = await client.get(f"/api/superadmin/stores/{store.id}", headers=headers)

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["store"]["id"] == store.id
    assert len(data["recentOrders"]) == 2
    assert data["topProducts"][0] == {"name": "Лепёшка", "quantity": 2, "revenue": 1000}
    assert data["settings"]["kaspiEnabled"] is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_change_plan(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session)

    response = await client.patch(
        f"/api/superadmin/stores/{store.id}/plan",
        json={"plan": "business"},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["plan"] == "business"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_suspend_store_hides_storefront(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session, slug="to-suspend")

    response = await client.patch(
        f"/api/superadmin/stores/{store.id}/active",
        json={"isActive": False},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["isActive"] is False
    assert (await client.get("/api/storefront/to-suspend")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_store_cascades(client, db_session, admin_user):
    """Deleting a store removes its catalog, orders and settings too."""
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session)
    db_session.add_all(
        [
            CategoryFactory.create(store_id=store.id),
            ProductFactory.create(store_id=store.id),
            OrderFactory.create(store_id=store.id),
        ]
    )
    await db_session.commit()

    response = await client.delete(
        f"/api/superadmin/stores/{store.id}", headers=headers
    )

    assert response.status_code == 200, response.text
    assert response.json() == {"ok": True}
    for model in (Store, Category, Product, Order, StoreSettings):
        assert await _count(db_session, model) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_store_is_404(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    response = await client.delete("/api/superadmin/stores/999", headers=headers)

    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Orders / analytics / events
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_orders_across_stores(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, first = await seed_owner_with_store(db_session, name="Первый")
    _, second = await seed_owner_with_store(db_session, name="Второй")
    db_session.add_all(
        [
            OrderFactory.create(store_id=first.id),
            OrderFactory.create(store_id=second.id),
        ]
    )
    await db_session.commit()

    everything = await client.get("/api/superadmin/orders", headers=headers)
    only_second = await client.get(
        f"/api/superadmin/orders?storeId={second.id}", headers=headers
    )

    assert len(everything.json()) == 2
    assert [o["storeName"] for o in only_second.json()] == ["Второй"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_platform_analytics(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session)
    await seed_owner_with_store(db_session, is_active=False, business_type=None)
    db_session.add(OrderFactory.create(store_id=store.id))
    await db_session.commit()

    response = await client.get("/api/superadmin/analytics", headers=headers)

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["totalStores"] == 2
    assert data["activeStores"] == 1
    assert data["totalUsers"] == 3
    assert data["totalRevenue"] == 1000
    assert {"plan": "free", "count": 2} in data["storesByPlan"]
    assert {"type": "other", "count": 1} in data["storesByType"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_events_feed(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    _, store = await seed_owner_with_store(db_session, name="Лента")
    await client.get(f"/api/storefront/{store.slug}")

    response = await client.get(
        "/api/superadmin/events?eventType=visit", headers=headers
    )

    assert response.status_code == 200, response.text
    [event] = response.json()
    assert event["storeName"] == "Лента"
    assert event["eventType"] == "visit"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_users_with_their_store(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    owner, store = await seed_owner_with_store(db_session)

    response = await client.get("/api/superadmin/users", headers=headers)

    rows = {row["id"]: row for row in response.json()}
    assert rows[owner.id]["storeSlug"] == store.slug
    assert rows[admin_user.id]["storeId"] is None
    assert rows[admin_user.id]["isSuperAdmin"] is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_grant_superadmin(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    owner, _ = await seed_owner_with_store(db_session)

    response = await client.patch(
        f"/api/superadmin/users/{owner.id}/superadmin",
        json={"isSuperAdmin": True},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["isSuperAdmin"] is True
    db_session.expire_all()
    assert (await db_session.get(User, owner.id)).is_super_admin is True


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cannot_revoke_own_rights(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    response = await client.patch(
        f"/api/superadmin/users/{admin_user.id}/superadmin",
        json={"isSuperAdmin": False},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Нельзя снять права суперадмина с себя"


# ---------------------------------------------------------------------------
# Tariffs / pixels
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_tariff_merges_overrides(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    first = await client.put(
        "/api/superadmin/tariffs/free", json={"productLimit": 50}, headers=headers
    )
    second = await client.put(
        "/api/superadmin/tariffs/free", json={"price": 990}, headers=headers
    )

    assert first.status_code == 200, first.text
    assert second.json()["productLimit"] == 50
    assert second.json()["price"] == 990

    cards = {c["plan"]: c for c in (await client.get("/api/tariffs")).json()}
    assert cards["free"]["productLimit"] == 50
    assert cards["pro"]["productLimit"] == 300


@pytest.mark.asyncio
@pytest.mark.integration
async def test_tracking_pixels_roundtrip(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    response = await client.put(
        "/api/superadmin/tracking-pixels",
        json={"facebookPixelId": "12'34", "tiktokPixelId": "TT_9"},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    assert response.json()["facebookPixelId"] == "1234"
    assert len(response.json()["snippets"]) == 2

    public = await client.get("/api/platform-pixels")
    assert public.json()["tiktokPixelId"] == "TT_9"


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_email_broadcast_without_provider(client, db_session, admin_user):
    """Without an e-mail API key the broadcast is recorded with no successes."""
    headers = await _seed_admin(db_session, admin_user)
    await seed_owner_with_store(db_session)

    response = await client.post(
        "/api/superadmin/email/broadcast",
        json={"subject": "Новости", "htmlContent": "<p>Привет</p>"},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["recipientCount"] == 2
    assert data["successCount"] == 0
    assert data["failCount"] == 2
    assert data["status"] == "failed"

    history = await client.get("/api/superadmin/email/broadcasts", headers=headers)
    assert [b["subject"] for b in history.json()] == ["Новости"]
    assert await _count(db_session, EmailBroadcast) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_waba_config_masks_key(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    saved = await client.put(
        "/api/superadmin/waba/config",
        json={"apiKey": "abcd1234efgh", "enabled": True},
        headers=headers,
    )
    kept = await client.put(
        "/api/superadmin/waba/config",
        json={"apiKey": "", "senderPhone": "77001234567"},
        headers=headers,
    )

    assert saved.status_code == 200, saved.text
    assert saved.json()["apiKey"] == "abcd...efgh"
    assert saved.json()["isConfigured"] is True
    assert kept.json()["apiKey"] == "abcd...efgh"
    assert kept.json()["senderPhone"] == "77001234567"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_waba_broadcast_requires_config(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    response = await client.post(
        "/api/superadmin/waba/broadcast",
        json={"targetType": "all_customers", "message": "Скидки!"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "WhatsApp Business API не настроен"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_waba_store_broadcast_requires_store(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)

    response = await client.post(
        "/api/superadmin/waba/broadcast",
        json={"targetType": "store_customers", "message": "Скидки!"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Выберите магазин"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_waba_test_message_and_log(client, db_session, admin_user):
    headers = await _seed_admin(db_session, admin_user)
    await set_platform_setting(
        db_session, WABA_CONFIG_KEY, {"apiKey": "key-123456789", "enabled": True}
    )
    await db_session.commit()

    with patch(
        "services.storefront_service.services.waba.WabaClient.send_text",
        new_callable=AsyncMock,
        return_value="wamid.test",
    ):
        sent = await client.post(
            "/api/superadmin/waba/test",
            json={"phone": "+7 700 123 45 67", "message": "Тест"},
            headers=headers,
        )

    assert sent.status_code == 200, sent.text
    assert sent.json()["status"] == "sent"
    assert sent.json()["recipientPhone"] == "77001234567"

    log = await client.get("/api/superadmin/waba/messages", headers=headers)
    assert log.json()["stats"] == {"total": 1, "sent": 1, "failed": 0}
