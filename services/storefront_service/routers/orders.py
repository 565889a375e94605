"""Owner order management routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.models import (
    Order,
    OrderStatus,
    PaymentStatus,
    Store,
)
from services.storefront_service.routers._helpers import get_my_store, not_found
from services.storefront_service.schemas import OrderResponse, OrderUpdate
from services.storefront_service.services.order_status import apply_status_update
from services.storefront_service.services.platform_stats import search_orders
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])

ORDER_NOT_FOUND = "Заказ не найден"


async def _get_order(db: AsyncSession, store: Store, order_id: int) -> Order:
    result = await db.execute(
        select(Order).where(Order.id == order_id, Order.store_id == store.id)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise not_found(ORDER_NOT_FOUND)
    return order


@router.get("/my-store/orders", response_model=list[OrderResponse])
async def list_orders(
    search: Optional[str] = None,
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    limit: int = Query(200, ge=1, le=500),
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """List orders, newest first, with search by name, phone or number."""
    return await search_orders(
        db,
        search=search,
        order_status=order_status,
        payment_status=payment_status,
        store_id=store.id,
        limit=limit,
    )


@router.get("/my-store/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Get one order."""
    return await _get_order(db, store, order_id)


@router.patch("/my-store/orders/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    order_in: OrderUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Move any of the three status axes, or edit the internal note."""
    order = await _get_order(db, store, order_id)
    update_data = order_in.model_dump(exclude_unset=True)

    changed = apply_status_update(order, update_data)
    if "internal_note" in update_data:
        order.internal_note = update_data["internal_note"] or None

    await db.commit()
    await db.refresh(order)
    if changed:
        logger.info(
            f"Order #{order.order_number} (store {store.id}) updated: "
            + ", ".join(f"{field}={value.value}" for field, value in changed.items())
        )
    return order
