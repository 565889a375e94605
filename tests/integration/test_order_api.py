"""Integration tests for checkout, invoices and owner order management."""

from unittest.mock import AsyncMock, patch
from urllib.parse import unquote

import pytest
from services.storefront_service.models import (
    Customer,
    Discount,
    DiscountAppliesTo,
    DiscountType,
    Order,
    OrderStatus,
    StoreEvent,
    StoreEventType,
    WhatsappMessage,
)
from services.storefront_service.services.platform_settings import (
    WABA_CONFIG_KEY,
    set_platform_setting,
)
from sqlalchemy import select
from tests.factories import (
    DiscountFactory,
    OrderFactory,
    ProductFactory,
    auth_headers,
    seed_owner_with_store,
)


async def _shop(db_session, **store_overrides):
    user, store = await seed_owner_with_store(db_session, **store_overrides)
    bread = ProductFactory.create(store_id=store.id, name="Лепёшка", price=500)
    cake = ProductFactory.create(store_id=store.id, name="Торт", price=4000)
    db_session.add_all([bread, cake])
    await db_session.commit()
    return user, store, bread, cake


def _order_payload(*items, **overrides):
    payload = {
        "customerName": "Алия",
        "customerPhone": "77011112233",
        "items": [{"productId": pid, "quantity": qty} for pid, qty in items],
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_creates_order_and_links(client, db_session):
    """Checkout prices from the catalog and returns WhatsApp and invoice links."""
    _, store, bread, cake = await _shop(db_session, slug="lepeshka")

    response = await client.post(
        "/api/storefront/lepeshka/order",
        json=_order_payload(
            (bread.id, 2), (cake.id, 1), customerAddress="ул. Абая 1"
        ),
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["order"]["orderNumber"] == 1
    assert data["order"]["subtotal"] == 5000
    assert data["order"]["total"] == 5000
    assert data["order"]["status"] == "pending"
    assert data["order"]["paymentStatus"] == "unpaid"
    assert data["order"]["items"][0]["productId"] == bread.id
    assert data["invoiceUrl"] == "https://tapp.test/invoice/lepeshka/1"

    message = unquote(data["whatsappUrl"].split("?text=", 1)[1])
    assert data["whatsappUrl"].startswith("https://wa.me/77771234567?text=")
    assert "2x Лепёшка - 1 000 ₸" in message
    assert "Адрес: ул. Абая 1" in message
    assert message.endswith("https://tapp.test/invoice/lepeshka/1")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_numbers_orders_and_upserts_customer(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    for _ in range(2):
        response = await client.post(
            f"/api/storefront/{store.slug}/order", json=_order_payload((bread.id, 1))
        )
        assert response.status_code == 201, response.text

    assert response.json()["order"]["orderNumber"] == 2
    result = await db_session.execute(
        select(Customer).where(Customer.store_id == store.id)
    )
    customer = result.scalars().one()
    assert customer.total_orders == 2
    assert customer.total_spent == 1000


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_normalizes_customer_phone(client, db_session):
    """Differently formatted numbers of one shopper land on one customer."""
    _, store, bread, _ = await _shop(db_session)

    for phone in ("+7 (701) 111-22-33", "87011112233"):
        response = await client.post(
            f"/api/storefront/{store.slug}/order",
            json=_order_payload((bread.id, 1), customerPhone=phone),
        )
        assert response.status_code == 201, response.text
        assert response.json()["order"]["customerPhone"] == "77011112233"

    result = await db_session.execute(
        select(Customer).where(Customer.store_id == store.id)
    )
    customer = result.scalars().one()
    assert customer.phone == "77011112233"
    assert customer.total_orders == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_incomplete_phone(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), customerPhone="+7 701 11"),
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Укажите номер телефона")
    result = await db_session.execute(select(Order))
    assert result.scalars().all() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_per_customer_cap_survives_reformatted_phone(client, db_session):
    _, store, bread, _ = await _shop(db_session)
    db_session.add(
        DiscountFactory.create(
            store_id=store.id,
            type=DiscountType.CODE,
            code="ONCE",
            max_per_customer=1,
        )
    )
    await db_session.commit()

    first = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 2), discountCode="ONCE"),
    )
    second = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload(
            (bread.id, 2), discountCode="ONCE", customerPhone="8 701 111 22 33"
        ),
    )

    assert first.status_code == 201, first.text
    assert second.status_code == 400
    assert second.json()["detail"] == "Промокод недействителен"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_code_for_product_not_in_cart_is_rejected(client, db_session):
    """A code that would save nothing is refused and its usage is untouched."""
    _, store, bread, cake = await _shop(db_session)
    db_session.add(
        DiscountFactory.create(
            store_id=store.id,
            type=DiscountType.CODE,
            code="CAKE",
            applies_to=DiscountAppliesTo.PRODUCTS,
            target_product_ids=[cake.id],
            max_total_uses=1,
        )
    )
    await db_session.commit()

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), discountCode="CAKE"),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Промокод недействителен"
    db_session.expire_all()
    result = await db_session.execute(select(Discount).where(Discount.code == "CAKE"))
    assert result.scalars().one().usage_count == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_applies_promo_code(client, db_session):
    _, store, _, cake = await _shop(db_session)
    db_session.add_all(
        [
            DiscountFactory.create(store_id=store.id, value=5),
            DiscountFactory.create(
                store_id=store.id, type=DiscountType.CODE, code="TORT", value=25
            ),
        ]
    )
    await db_session.commit()

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((cake.id, 1), discountCode="tort"),
    )

    assert response.status_code == 201, response.text
    order = response.json()["order"]
    assert order["discountCode"] == "TORT"
    assert order["discountAmount"] == 1000
    assert order["total"] == 3000

    db_session.expire_all()
    result = await db_session.execute(select(Discount).where(Discount.code == "TORT"))
    assert result.scalars().one().usage_count == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_invalid_promo_code(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), discountCode="NOPE"),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Промокод недействителен"
    assert (await db_session.execute(select(Order))).scalars().first() is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_kaspi_unavailable(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), paymentMethod="kaspi"),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Оплата через Kaspi недоступна"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_delivery_disabled(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), fulfillmentType="delivery"),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Доставка недоступна"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_delivery_fee_and_free_threshold(client, db_session):
    _, store, bread, cake = await _shop(db_session)
    store.delivery.delivery_enabled = True
    store.delivery.delivery_fee = 800
    store.delivery.delivery_free_threshold = 4000
    await db_session.commit()

    small = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((bread.id, 1), fulfillmentType="delivery"),
    )
    large = await client.post(
        f"/api/storefront/{store.slug}/order",
        json=_order_payload((cake.id, 1), fulfillmentType="delivery"),
    )

    assert small.json()["order"]["deliveryFee"] == 800
    assert small.json()["order"]["total"] == 1300
    assert large.json()["order"]["deliveryFee"] == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_unknown_product(client, db_session):
    _, store, _, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order", json=_order_payload((9999, 1))
    )

    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_on_suspended_store_is_404(client, db_session):
    _, store, bread, _ = await _shop(db_session, is_active=False)

    response = await client.post(
        f"/api/storefront/{store.slug}/order", json=_order_payload((bread.id, 1))
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_notifies_owner_when_waba_configured(client, db_session):
    _, store, bread, _ = await _shop(db_session)
    await set_platform_setting(
        db_session, WABA_CONFIG_KEY, {"apiKey": "key-123456789", "enabled": True}
    )
    await db_session.commit()

    with patch(
        "services.storefront_service.services.waba.WabaClient.send_text",
        new_callable=AsyncMock,
        return_value="wamid.1",
    ) as send:
        response = await client.post(
            f"/api/storefront/{store.slug}/order", json=_order_payload((bread.id, 1))
        )

    assert response.status_code == 201, response.text
    send.assert_awaited_once()
    assert send.await_args.args[0] == "77771234567"
    result = await db_session.execute(select(WhatsappMessage))
    assert result.scalars().one().wamid == "wamid.1"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_without_waba_sends_nothing(client, db_session):
    _, store, bread, _ = await _shop(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/order", json=_order_payload((bread.id, 1))
    )

    assert response.status_code == 201
    assert (await db_session.execute(select(WhatsappMessage))).scalars().first() is None


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invoice_with_kaspi(client, db_session):
    _, store = await seed_owner_with_store(db_session, slug="lepeshka")
    store.settings.kaspi_enabled = True
    store.settings.kaspi_pay_url = "https://pay.kaspi.kz/pay/abc"
    db_session.add(OrderFactory.create(store_id=store.id, order_number=7))
    await db_session.commit()

    response = await client.get("/api/orders/lepeshka/7")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["order"]["orderNumber"] == 7
    assert data["store"]["slug"] == "lepeshka"
    assert data["statusLabel"] == "Новый"
    assert data["paymentStatusLabel"] == "Не оплачен"
    assert data["totalFormatted"] == "1 000 ₸"
    assert data["kaspi"]["payUrl"] == "https://pay.kaspi.kz/pay/abc"
    assert data["kaspi"]["amount"] == 1000


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invoice_without_kaspi(client, db_session):
    _, store = await seed_owner_with_store(db_session)
    db_session.add(OrderFactory.create(store_id=store.id, order_number=1))
    await db_session.commit()

    response = await client.get(f"/api/orders/{store.slug}/1")

    assert response.json()["kaspi"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invoice_missing_order(client, db_session):
    _, store = await seed_owner_with_store(db_session)

    response = await client.get(f"/api/orders/{store.slug}/99")

    assert response.status_code == 404
    assert response.json()["detail"] == "Заказ не найден"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_public_order_by_id(client, db_session):
    _, store = await seed_owner_with_store(db_session)
    order = OrderFactory.create(store_id=store.id)
    db_session.add(order)
    await db_session.commit()

    response = await client.get(f"/api/orders/{order.id}")

    assert response.status_code == 200
    assert response.json()["customerName"] == "Алия"


# ---------------------------------------------------------------------------
# Owner order management
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_orders_with_search_and_filter(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    db_session.add_all(
        [
            OrderFactory.create(store_id=store.id, order_number=1, customer_name="Алия"),
            OrderFactory.create(
                store_id=store.id,
                order_number=2,
                customer_name="Берик",
                customer_phone="77024445566",
                status=OrderStatus.CONFIRMED,
            ),
        ]
    )
    await db_session.commit()
    headers = auth_headers(user)

    by_number = await client.get("/api/my-store/orders?search=%232", headers=headers)
    by_status = await client.get("/api/my-store/orders?status=pending", headers=headers)
    everything = await client.get("/api/my-store/orders", headers=headers)

    assert [o["orderNumber"] for o in by_number.json()] == [2]
    assert [o["orderNumber"] for o in by_status.json()] == [1]
    assert len(everything.json()) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_payment_status_only(client, db_session):
    """Marking an order paid leaves its primary status alone."""
    user, store = await seed_owner_with_store(db_session)
    order = OrderFactory.create(store_id=store.id)
    db_session.add(order)
    await db_session.commit()

    response = await client.patch(
        f"/api/my-store/orders/{order.id}",
        json={"paymentStatus": "paid", "internalNote": "Оплата Kaspi"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["paymentStatus"] == "paid"
    assert data["status"] == "pending"
    assert data["fulfillmentStatus"] == "unfulfilled"
    assert data["internalNote"] == "Оплата Kaspi"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_status_transition(client, db_session):
    user, store = await seed_owner_with_store(db_session)
    order = OrderFactory.create(store_id=store.id, status=OrderStatus.COMPLETED)
    db_session.add(order)
    await db_session.commit()

    response = await client.patch(
        f"/api/my-store/orders/{order.id}",
        json={"status": "pending"},
        headers=auth_headers(user),
    )

    assert response.status_code == 400
    db_session.expire_all()
    assert (await db_session.get(Order, order.id)).status == OrderStatus.COMPLETED


@pytest.mark.asyncio
@pytest.mark.integration
async def test_other_owners_order_is_404(client, db_session):
    _, other = await seed_owner_with_store(db_session)
    order = OrderFactory.create(store_id=other.id)
    db_session.add(order)
    await db_session.commit()
    user, _ = await seed_owner_with_store(db_session)

    response = await client.get(
        f"/api/my-store/orders/{order.id}", headers=auth_headers(user)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_event_tracking(client, db_session):
    _, store = await seed_owner_with_store(db_session)

    response = await client.post(
        f"/api/storefront/{store.slug}/event",
        json={"eventType": "add_to_cart", "metaJson": {"productId": 1}},
    )

    assert response.status_code == 201, response.text
    event = (await db_session.execute(select(StoreEvent))).scalars().one()
    assert event.event_type == StoreEventType.ADD_TO_CART
    assert event.meta_json == {"productId": 1}
