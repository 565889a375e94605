"""Cross-tenant queries for the superadmin console."""

from typing import Optional

from services.storefront_service.models import (
    Customer,
    Order,
    OrderStatus,
    PaymentStatus,
    Product,
    Store,
    StoreEvent,
    StoreEventType,
    User,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

RECENT_LIMIT = 10
TOP_PRODUCTS_LIMIT = 5


def _revenue_filter():
    # Cancelled orders are not revenue
    return Order.status != OrderStatus.CANCELLED


async def _count(db: AsyncSession, model, *where) -> int:
    query = select(func.count()).select_from(model)
    if where:
        query = query.where(*where)
    return (await db.execute(query)).scalar() or 0


async def platform_analytics(db: AsyncSession) -> dict:
    revenue = (
        await db.execute(
            select(func.coalesce(func.sum(Order.total), 0)).where(_revenue_filter())
        )
    ).scalar() or 0

    by_plan = await db.execute(
        select(Store.plan, func.count()).group_by(Store.plan).order_by(Store.plan)
    )
    by_type = await db.execute(
        select(Store.business_type, func.count())
        .group_by(Store.business_type)
        .order_by(func.count().desc())
    )
    recent = await db.execute(
        select(Store).order_by(Store.created_at.desc(), Store.id.desc()).limit(
            RECENT_LIMIT
        )
    )

    return {
        "totalStores": await _count(db, Store),
        "activeStores": await _count(db, Store, Store.is_active.is_(True)),
        "totalUsers": await _count(db, User),
        "totalOrders": await _count(db, Order),
        "totalRevenue": int(revenue),
        "totalProducts": await _count(db, Product),
        "totalCustomers": await _count(db, Customer),
        "storesByPlan": [
            {"plan": getattr(plan, "value", plan), "count": count}
            for plan, count in by_plan.all()
        ],
        "storesByType": [
            {"type": business_type or "other", "count": count}
            for business_type, count in by_type.all()
        ],
        "recentStores": list(recent.scalars().all()),
    }


async def store_counters(db: AsyncSession, store_ids: list[int]) -> dict[int, dict]:
    """Products, orders, revenue and customers per store, in four queries."""
    counters = {
        store_id: {"products": 0, "orders": 0, "revenue": 0, "customers": 0}
        for store_id in store_ids
    }
    if not store_ids:
        return counters

    products = await db.execute(
        select(Product.store_id, func.count())
        .where(Product.store_id.in_(store_ids))
        .group_by(Product.store_id)
    )
    for store_id, count in products.all():
        counters[store_id]["products"] = count

    orders = await db.execute(
        select(Order.store_id, func.count())
        .where(Order.store_id.in_(store_ids))
        .group_by(Order.store_id)
    )
    for store_id, count in orders.all():
        counters[store_id]["orders"] = count

    revenue = await db.execute(
        select(Order.store_id, func.coalesce(func.sum(Order.total), 0))
        .where(Order.store_id.in_(store_ids), _revenue_filter())
        .group_by(Order.store_id)
    )
    for store_id, total in revenue.all():
        counters[store_id]["revenue"] = int(total)

    customers = await db.execute(
        select(Customer.store_id, func.count())
        .where(Customer.store_id.in_(store_ids))
        .group_by(Customer.store_id)
    )
    for store_id, count in customers.all():
        counters[store_id]["customers"] = count

    return counters


async def owner_emails(db: AsyncSession, user_ids: list[str]) -> dict[str, Optional[str]]:
    if not user_ids:
        return {}
    result = await db.execute(
        select(User.id, User.email).where(User.id.in_(set(user_ids)))
    )
    return {user_id: email for user_id, email in result.all()}


def top_products(orders: list[Order], limit: int = TOP_PRODUCTS_LIMIT) -> list[dict]:
    """Best sellers by quantity, computed from order snapshots."""
    totals: dict[str, dict] = {}
    for order in orders:
        if order.status == OrderStatus.CANCELLED:
            continue
        for item in order.items or []:
            entry = totals.setdefault(
                item["name"], {"name": item["name"], "quantity": 0, "revenue": 0}
            )
            entry["quantity"] += item["quantity"]
            entry["revenue"] += item["price"] * item["quantity"]
    ranked = sorted(totals.values(), key=lambda e: (-e["quantity"], -e["revenue"]))
    return ranked[:limit]


async def search_orders(
    db: AsyncSession,
    search: Optional[str] = None,
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    store_id: Optional[int] = None,
    limit: int = 200,
) -> list[Order]:
    query = select(Order)
    if store_id is not None:
        query = query.where(Order.store_id == store_id)
    if order_status is not None:
        query = query.where(Order.status == order_status)
    if payment_status is not None:
        query = query.where(Order.payment_status == payment_status)
    if search:
        pattern = f"%{search.strip()}%"
        conditions = [
            Order.customer_name.ilike(pattern),
            Order.customer_phone.ilike(pattern),
        ]
        if search.strip().lstrip("#").isdigit():
            conditions.append(Order.order_number == int(search.strip().lstrip("#")))
        query = query.where(or_(*conditions))
    result = await db.execute(
        query.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def recent_events(
    db: AsyncSession, event_type: Optional[StoreEventType] = None, limit: int = 100
) -> list[tuple[StoreEvent, str]]:
    """Latest storefront events across all stores, with the store name."""
    query = select(StoreEvent, Store.name).join(Store, Store.id == StoreEvent.store_id)
    if event_type is not None:
        query = query.where(StoreEvent.event_type == event_type)
    result = await db.execute(
        query.order_by(StoreEvent.created_at.desc(), StoreEvent.id.desc()).limit(limit)
    )
    return [(event, store_name) for event, store_name in result.all()]
