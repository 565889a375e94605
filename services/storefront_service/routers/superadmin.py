"""Superadmin console routes: every tenant, users, tariffs and messaging."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.models import (
    Customer,
    Order,
    OrderStatus,
    PaymentStatus,
    Plan,
    Store,
    StoreEventType,
    User,
)
from services.storefront_service.routers._helpers import not_found, require_superadmin
from services.storefront_service.schemas import (
    ActiveUpdate,
    AdminOrderResponse,
    AdminStoreDetailResponse,
    AdminStoreResponse,
    AdminUserResponse,
    CustomerResponse,
    EmailBroadcastRequest,
    EmailBroadcastResponse,
    MessageStats,
    OkResponse,
    OrderResponse,
    PlanUpdate,
    PlatformAnalyticsResponse,
    PlatformEventResponse,
    PlatformPixelsResponse,
    SettingsResponse,
    StoreResponse,
    SuperadminUpdate,
    TariffCard,
    TariffUpdate,
    ThemeResponse,
    TopProduct,
    TrackingPixelsSchema,
    WabaBroadcastRequest,
    WabaConfigResponse,
    WabaConfigUpdate,
    WabaMessagesResponse,
    WabaTestRequest,
    WhatsappMessageResponse,
)
from services.storefront_service.services import broadcasts, platform_stats, waba
from services.storefront_service.services.pixels import (
    PixelRegistry,
    get_pixel_registry,
)
from services.storefront_service.services.platform_settings import (
    TARIFFS_KEY,
    set_platform_setting,
)
from services.storefront_service.services.stores import get_tariff_overrides
from services.storefront_service.services.usage import tariff_card
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["superadmin"])

RECENT_DETAIL_LIMIT = 10


async def _get_store(db: AsyncSession, store_id: int) -> Store:
    store = await db.get(Store, store_id)
    if store is None:
        raise not_found()
    return store


async def _admin_store(db: AsyncSession, store: Store) -> AdminStoreResponse:
    counters = (await platform_stats.store_counters(db, [store.id]))[store.id]
    emails = await platform_stats.owner_emails(db, [store.owner_user_id])
    return AdminStoreResponse(
        **StoreResponse.model_validate(store).model_dump(),
        owner_email=emails.get(store.owner_user_id),
        products_count=counters["products"],
        orders_count=counters["orders"],
        revenue=counters["revenue"],
        customers_count=counters["customers"],
    )


# ============================================================================
# ANALYTICS
# ============================================================================


@router.get("/superadmin/analytics", response_model=PlatformAnalyticsResponse)
async def get_platform_analytics(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Platform totals and breakdowns."""
    return PlatformAnalyticsResponse.model_validate(
        await platform_stats.platform_analytics(db)
    )


# ============================================================================
# STORES
# ============================================================================


@router.get("/superadmin/stores", response_model=list[AdminStoreResponse])
async def list_stores(
    search: Optional[str] = None,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """All stores with owner e-mail and counters."""
    query = select(Store)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Store.name.ilike(pattern), Store.slug.ilike(pattern)))
    result = await db.execute(query.order_by(Store.created_at.desc(), Store.id.desc()))
    stores = list(result.scalars().all())

    counters = await platform_stats.store_counters(db, [s.id for s in stores])
    emails = await platform_stats.owner_emails(db, [s.owner_user_id for s in stores])
    return [
        AdminStoreResponse(
            **StoreResponse.model_validate(store).model_dump(),
            owner_email=emails.get(store.owner_user_id),
            products_count=counters[store.id]["products"],
            orders_count=counters[store.id]["orders"],
            revenue=counters[store.id]["revenue"],
            customers_count=counters[store.id]["customers"],
        )
        for store in stores
    ]


@router.get("/superadmin/stores/{store_id}", response_model=AdminStoreDetailResponse)
async def get_store_detail(
    store_id: int,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """One store with recent orders, customers and best sellers."""
    store = await _get_store(db, store_id)

    orders = await db.execute(
        select(Order)
        .where(Order.store_id == store.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    orders = list(orders.scalars().all())
    customers = await db.execute(
        select(Customer)
        .where(Customer.store_id == store.id)
        .order_by(Customer.created_at.desc(), Customer.id.desc())
        .limit(RECENT_DETAIL_LIMIT)
    )

    return AdminStoreDetailResponse(
        store=await _admin_store(db, store),
        settings=SettingsResponse.model_validate(store.settings)
        if store.settings
        else None,
        theme=ThemeResponse.model_validate(store.theme) if store.theme else None,
        recent_orders=[
            OrderResponse.model_validate(o) for o in orders[:RECENT_DETAIL_LIMIT]
        ],
        recent_customers=[
            CustomerResponse.model_validate(c) for c in customers.scalars().all()
        ],
        top_products=[
            TopProduct.model_validate(p) for p in platform_stats.top_products(orders)
        ],
    )


@router.delete("/superadmin/stores/{store_id}", response_model=OkResponse)
async def delete_store(
    store_id: int,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a store and everything that belongs to it."""
    store = await _get_store(db, store_id)
    await db.delete(store)
    await db.commit()
    logger.warning(f"Store {store_id} ({store.slug}) deleted by {admin.id}")
    return OkResponse()


@router.patch("/superadmin/stores/{store_id}/plan", response_model=AdminStoreResponse)
async def update_store_plan(
    store_id: int,
    plan_in: PlanUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Move a store to another plan."""
    store = await _get_store(db, store_id)
    if plan_in.plan != store.plan:
        store.plan = plan_in.plan
        store.plan_started_at = utc_now()
    store.plan_expires_at = plan_in.plan_expires_at
    await db.commit()
    await db.refresh(store)
    return await _admin_store(db, store)


@router.patch(
    "/superadmin/stores/{store_id}/active", response_model=AdminStoreResponse
)
async def update_store_active(
    store_id: int,
    active_in: ActiveUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Suspend or reinstate a store; suspended storefronts return 404."""
    store = await _get_store(db, store_id)
    store.is_active = active_in.is_active
    await db.commit()
    await db.refresh(store)
    return await _admin_store(db, store)


# ============================================================================
# ORDERS
# ============================================================================


@router.get("/superadmin/orders", response_model=list[AdminOrderResponse])
async def list_all_orders(
    search: Optional[str] = None,
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    store_id: Optional[int] = Query(None, alias="storeId"),
    limit: int = Query(200, ge=1, le=500),
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Orders across all stores."""
    orders = await platform_stats.search_orders(
        db,
        search=search,
        order_status=order_status,
        payment_status=payment_status,
        store_id=store_id,
        limit=limit,
    )
    store_ids = {order.store_id for order in orders}
    stores = {}
    if store_ids:
        result = await db.execute(
            select(Store.id, Store.name, Store.slug).where(Store.id.in_(store_ids))
        )
        stores = {row[0]: (row[1], row[2]) for row in result.all()}
    return [
        AdminOrderResponse(
            **OrderResponse.model_validate(order).model_dump(),
            store_name=stores.get(order.store_id, (None, None))[0],
            store_slug=stores.get(order.store_id, (None, None))[1],
        )
        for order in orders
    ]


# ============================================================================
# USERS & EVENTS
# ============================================================================


def _admin_user(user: User, store: Optional[Store]) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        is_super_admin=user.is_super_admin,
        created_at=user.created_at,
        store_id=store.id if store else None,
        store_name=store.name if store else None,
        store_slug=store.slug if store else None,
    )


@router.get("/superadmin/users", response_model=list[AdminUserResponse])
async def list_users(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """All users with the store they own, if any."""
    result = await db.execute(
        select(User, Store)
        .outerjoin(Store, Store.owner_user_id == User.id)
        .order_by(User.created_at.desc(), User.id)
    )
    users = []
    seen = set()
    for user, store in result.all():
        if user.id in seen:
            continue
        seen.add(user.id)
        users.append(_admin_user(user, store))
    return users


@router.patch(
    "/superadmin/users/{user_id}/superadmin", response_model=AdminUserResponse
)
async def update_superadmin(
    user_id: str,
    update_in: SuperadminUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Grant or revoke superadmin rights."""
    if user_id == admin.id and not update_in.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Нельзя снять права суперадмина с себя",
        )
    user = await db.get(User, user_id)
    if user is None:
        raise not_found("Пользователь не найден")
    user.is_super_admin = update_in.is_super_admin
    await db.commit()
    await db.refresh(user)

    result = await db.execute(
        select(Store).where(Store.owner_user_id == user.id).order_by(Store.id)
    )
    return _admin_user(user, result.scalars().first())


@router.get("/superadmin/events", response_model=list[PlatformEventResponse])
async def list_events(
    event_type: Optional[StoreEventType] = Query(None, alias="eventType"),
    limit: int = Query(100, ge=1, le=1000),
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Latest storefront events across all stores."""
    events = await platform_stats.recent_events(db, event_type=event_type, limit=limit)
    return [
        PlatformEventResponse(
            id=event.id,
            store_id=event.store_id,
            store_name=store_name,
            event_type=event.event_type,
            meta_json=event.meta_json,
            created_at=event.created_at,
        )
        for event, store_name in events
    ]


# ============================================================================
# TRACKING PIXELS & TARIFFS
# ============================================================================


@router.get("/superadmin/tracking-pixels", response_model=PlatformPixelsResponse)
async def get_tracking_pixels(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
    registry: PixelRegistry = Depends(get_pixel_registry),
):
    """Current platform pixel ids, read fresh from the database."""
    pixels = await registry.load(db)
    return PlatformPixelsResponse(
        facebook_pixel_id=pixels.facebook_pixel_id,
        tiktok_pixel_id=pixels.tiktok_pixel_id,
        snippets=pixels.snippets(),
    )


@router.put("/superadmin/tracking-pixels", response_model=PlatformPixelsResponse)
async def update_tracking_pixels(
    pixels_in: TrackingPixelsSchema,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
    registry: PixelRegistry = Depends(get_pixel_registry),
):
    """Set platform pixel ids; unsafe characters are stripped."""
    pixels = await registry.update(
        db, pixels_in.facebook_pixel_id, pixels_in.tiktok_pixel_id
    )
    await db.commit()
    return PlatformPixelsResponse(
        facebook_pixel_id=pixels.facebook_pixel_id,
        tiktok_pixel_id=pixels.tiktok_pixel_id,
        snippets=pixels.snippets(),
    )


@router.get("/superadmin/tariffs", response_model=list[TariffCard])
async def get_tariffs(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Plans with the current overrides applied."""
    overrides = await get_tariff_overrides(db)
    return [TariffCard.model_validate(tariff_card(plan, overrides)) for plan in Plan]


@router.put("/superadmin/tariffs/{plan}", response_model=TariffCard)
async def update_tariff(
    plan: Plan,
    tariff_in: TariffUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Override a plan's price, name, features or limits."""
    overrides = dict(await get_tariff_overrides(db))
    current = dict(overrides.get(plan.value) or {})
    current.update(
        {
            key: value
            for key, value in tariff_in.model_dump(
                by_alias=True, exclude_unset=True
            ).items()
            if value is not None
        }
    )
    overrides[plan.value] = current
    await set_platform_setting(db, TARIFFS_KEY, overrides)
    await db.commit()
    return TariffCard.model_validate(tariff_card(plan, overrides))


# ============================================================================
# EMAIL BROADCASTS
# ============================================================================


@router.post(
    "/superadmin/email/broadcast",
    response_model=EmailBroadcastResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_email_broadcast(
    broadcast_in: EmailBroadcastRequest,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """E-mail every registered user."""
    broadcast = await broadcasts.send_broadcast(
        db, broadcast_in.subject, broadcast_in.html_content, sent_by=admin.id
    )
    await db.commit()
    await db.refresh(broadcast)
    return broadcast


@router.get("/superadmin/email/broadcasts", response_model=list[EmailBroadcastResponse])
async def list_email_broadcasts(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Past broadcasts, newest first."""
    return await broadcasts.list_broadcasts(db)


# ============================================================================
# WHATSAPP BUSINESS
# ============================================================================


@router.get("/superadmin/waba/config", response_model=WabaConfigResponse)
async def read_waba_config(
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """WABA settings with the API key masked."""
    config = await waba.get_waba_config(db)
    return WabaConfigResponse.model_validate(config.to_public())


@router.put("/superadmin/waba/config", response_model=WabaConfigResponse)
async def update_waba_config(
    config_in: WabaConfigUpdate,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update WABA settings. A blank API key keeps the stored one."""
    config = await waba.save_waba_config(
        db, config_in.model_dump(by_alias=True, exclude_unset=True)
    )
    await db.commit()
    return WabaConfigResponse.model_validate(config.to_public())


@router.post("/superadmin/waba/test", response_model=WhatsappMessageResponse)
async def send_waba_test(
    test_in: WabaTestRequest,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Send a test message; the logged attempt is returned either way."""
    message = await waba.send_text_message(db, test_in.phone, test_in.message)
    await db.commit()
    await db.refresh(message)
    return message


@router.get("/superadmin/waba/messages", response_model=WabaMessagesResponse)
async def list_waba_messages(
    store_id: Optional[int] = Query(None, alias="storeId"),
    limit: int = Query(50, ge=1, le=500),
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Recent message attempts with delivery stats."""
    messages = await waba.list_messages(db, limit=limit, store_id=store_id)
    return WabaMessagesResponse(
        messages=[WhatsappMessageResponse.model_validate(m) for m in messages],
        stats=MessageStats.model_validate(await waba.message_stats(db)),
    )


@router.post("/superadmin/waba/broadcast", response_model=MessageStats)
async def send_waba_broadcast(
    broadcast_in: WabaBroadcastRequest,
    admin: User = Depends(require_superadmin),
    db: AsyncSession = Depends(get_async_db),
):
    """Text every customer of one store, or of the whole platform."""
    store_id = None
    if broadcast_in.target_type == "store_customers":
        if broadcast_in.store_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Выберите магазин"
            )
        store_id = (await _get_store(db, broadcast_in.store_id)).id

    config = await waba.get_waba_config(db)
    if not config.is_configured:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="WhatsApp Business API не настроен",
        )
    result = await waba.broadcast_to_customers(
        db, broadcast_in.message, store_id=store_id
    )
    await db.commit()
    logger.info(
        f"WABA broadcast by {admin.id}: {result['sent']}/{result['total']} sent"
    )
    return MessageStats.model_validate(result)
