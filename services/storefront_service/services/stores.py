"""Store lookup, creation and the per-store usage and analytics queries."""

from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import start_of_local_month, utc_now
from services.storefront_service.models import (
    DeliverySettings,
    Order,
    Plan,
    Product,
    Store,
    StoreEvent,
    StoreEventType,
    StoreSettings,
    StoreTheme,
)
from services.storefront_service.services.platform_settings import (
    TARIFFS_KEY,
    get_platform_setting,
)
from services.storefront_service.services.usage import (
    UsageSnapshot,
    limits_from_tariffs,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

STORE_NOT_FOUND = "Магазин не найден"
SLUG_TAKEN = "Этот URL уже занят"
ANALYTICS_WINDOW_DAYS = 30


async def get_store_by_owner(db: AsyncSession, user_id: str) -> Optional[Store]:
    result = await db.execute(
        select(Store).where(Store.owner_user_id == user_id).order_by(Store.id)
    )
    return result.scalars().first()


async def get_store_by_slug(db: AsyncSession, slug: str) -> Optional[Store]:
    result = await db.execute(select(Store).where(Store.slug == slug))
    return result.scalar_one_or_none()


async def ensure_slug_available(
    db: AsyncSession, slug: str, current: Optional[Store] = None
) -> None:
    if current is not None and current.slug == slug:
        return
    if await get_store_by_slug(db, slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SLUG_TAKEN)


async def create_store(db: AsyncSession, owner_user_id: str, data: dict) -> Store:
    """Create a store with default theme, settings and delivery rows.

    One store per owner. Caller commits.
    """
    if await get_store_by_owner(db, owner_user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="У вас уже есть магазин"
        )
    await ensure_slug_available(db, data["slug"])

    store = Store(
        owner_user_id=owner_user_id,
        name=data["name"],
        slug=data["slug"],
        whatsapp_phone=data["whatsapp_phone"],
        city=data.get("city") or None,
        description=data.get("description") or None,
        business_type=data.get("business_type") or None,
        plan=Plan.FREE,
        plan_started_at=utc_now(),
        is_active=True,
    )
    store.theme = StoreTheme()
    store.settings = StoreSettings()
    store.delivery = DeliverySettings()
    db.add(store)
    await db.flush()
    return store


# ============================================================================
# USAGE
# ============================================================================


async def get_tariff_overrides(db: AsyncSession) -> dict:
    return (await get_platform_setting(db, TARIFFS_KEY)) or {}


async def count_products(db: AsyncSession, store_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Product).where(Product.store_id == store_id)
    )
    return result.scalar() or 0


async def count_images(db: AsyncSession, store_id: int) -> int:
    result = await db.execute(
        select(Product.image_urls).where(Product.store_id == store_id)
    )
    return sum(len(urls or []) for urls in result.scalars().all())


async def count_monthly_orders(db: AsyncSession, store_id: int) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Order)
        .where(Order.store_id == store_id, Order.created_at >= start_of_local_month())
    )
    return result.scalar() or 0


async def get_usage_snapshot(db: AsyncSession, store: Store) -> UsageSnapshot:
    plan = Plan(store.plan)
    limits = limits_from_tariffs(plan, await get_tariff_overrides(db))
    return UsageSnapshot(
        plan=plan,
        products=await count_products(db, store.id),
        product_limit=limits.products,
        monthly_orders=await count_monthly_orders(db, store.id),
        order_limit=limits.monthly_orders,
        total_images=await count_images(db, store.id),
        image_limit=limits.images,
    )


async def ensure_product_capacity(db: AsyncSession, store: Store) -> None:
    """Refuse a new product once the plan's product limit is reached."""
    plan = Plan(store.plan)
    limit = limits_from_tariffs(plan, await get_tariff_overrides(db)).products
    if limit < 0:
        return
    if await count_products(db, store.id) >= limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Лимит товаров: {limit}. Обновите тариф.",
        )


# ============================================================================
# EVENTS & ANALYTICS
# ============================================================================


def record_event(
    db: AsyncSession,
    store_id: int,
    event_type: StoreEventType,
    meta: Optional[dict] = None,
) -> StoreEvent:
    event = StoreEvent(store_id=store_id, event_type=event_type, meta_json=meta)
    db.add(event)
    return event


async def get_store_analytics(db: AsyncSession, store_id: int) -> dict:
    """Funnel event counts over the last 30 days."""
    since = utc_now() - timedelta(days=ANALYTICS_WINDOW_DAYS)
    result = await db.execute(
        select(StoreEvent.event_type, func.count())
        .where(StoreEvent.store_id == store_id, StoreEvent.created_at >= since)
        .group_by(StoreEvent.event_type)
    )
    counts = {StoreEventType(row[0]): row[1] for row in result.all()}
    return {
        "visits": counts.get(StoreEventType.VISIT, 0),
        "addToCarts": counts.get(StoreEventType.ADD_TO_CART, 0),
        "checkouts": counts.get(StoreEventType.CHECKOUT_CLICK, 0),
    }
