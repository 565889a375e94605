"""Public checkout: turn a storefront cart into an order.

Prices are never taken from the client. Each line is re-read from the
catalog and frozen into the order's ``items`` snapshot. At most one discount
applies per order: the promo code when one is given, otherwise the best
automatic discount. The order number is ``max + 1`` within the store,
computed inside the creating transaction. The customer phone is reduced to
its 11 digits before it keys the customer aggregate or discount usage.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.storefront_service.models import (
    DEFAULT_WHATSAPP_TEMPLATE,
    Customer,
    Discount,
    DiscountType,
    FulfillmentType,
    Order,
    PaymentMethod,
    Product,
    Store,
)
from services.storefront_service.services.discounts import (
    CartLine,
    DiscountContext,
    DiscountResult,
    best_automatic_discount,
    evaluate_discount,
)
from services.storefront_service.services.kaspi import is_kaspi_available
from services.storefront_service.services.phone import normalize_kz_phone
from services.storefront_service.services.whatsapp_message import (
    append_invoice_link,
    build_whatsapp_link,
    render_order_message,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

INVALID_PROMO_CODE = "Промокод недействителен"
INVALID_PHONE = "Укажите номер телефона в формате +7 (XXX) XXX-XX-XX"


@dataclass
class CheckoutItem:
    product_id: int
    quantity: int


@dataclass
class CheckoutRequest:
    customer_name: str
    customer_phone: str
    items: list[CheckoutItem]
    customer_address: Optional[str] = None
    customer_comment: Optional[str] = None
    discount_code: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.WHATSAPP
    fulfillment_type: Optional[FulfillmentType] = None


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _load_products(
    db: AsyncSession, store_id: int, items: list[CheckoutItem]
) -> dict[int, Product]:
    ids = {item.product_id for item in items}
    result = await db.execute(
        select(Product).where(
            Product.store_id == store_id,
            Product.id.in_(ids),
            Product.is_active.is_(True),
        )
    )
    products = {product.id: product for product in result.scalars().all()}
    if set(products) != ids:
        raise _bad_request("Товар не найден или недоступен")
    return products


def snapshot_items(
    items: list[CheckoutItem], products: dict[int, Product]
) -> tuple[list[dict], list[CartLine]]:
    """Frozen order lines plus the cart lines discounts are evaluated on."""
    snapshot = []
    lines = []
    for item in items:
        product = products[item.product_id]
        price = product.effective_price
        snapshot.append(
            {
                "productId": product.id,
                "name": product.name,
                "quantity": item.quantity,
                "price": price,
                "imageUrl": (product.image_urls or [None])[0],
            }
        )
        lines.append(
            CartLine(
                product_id=product.id,
                quantity=item.quantity,
                price=price,
                category_id=product.category_id,
            )
        )
    return snapshot, lines


def resolve_fulfillment(
    store: Store, requested: Optional[FulfillmentType], subtotal: int
) -> tuple[Optional[FulfillmentType], int]:
    """Check the requested fulfillment against the store and price delivery."""
    delivery = store.delivery
    if requested is None:
        return None, 0
    if requested is FulfillmentType.DELIVERY:
        if delivery is None or not delivery.delivery_enabled:
            raise _bad_request("Доставка недоступна")
        fee = delivery.delivery_fee or 0
        threshold = delivery.delivery_free_threshold
        if threshold is not None and subtotal >= threshold:
            fee = 0
        return requested, fee
    if delivery is not None and not delivery.pickup_enabled:
        raise _bad_request("Самовывоз недоступен")
    return requested, 0


async def _customer_uses(
    db: AsyncSession, store_id: int, phone: str, discount_id: int
) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Order)
        .where(
            Order.store_id == store_id,
            Order.customer_phone == phone,
            Order.discount_id == discount_id,
        )
    )
    return result.scalar() or 0


async def choose_discount(
    db: AsyncSession,
    store_id: int,
    customer_phone: str,
    lines: list[CartLine],
    delivery_fee: int,
    code: Optional[str],
) -> tuple[Optional[Discount], Optional[DiscountResult]]:
    result = await db.execute(
        select(Discount).where(
            Discount.store_id == store_id, Discount.is_active.is_(True)
        )
    )
    discounts = list(result.scalars().all())
    now = utc_now()

    if code:
        normalized = code.strip().upper()
        for discount in discounts:
            if discount.type != DiscountType.CODE or discount.code != normalized:
                continue
            ctx = DiscountContext(
                lines=lines,
                delivery_fee=delivery_fee,
                code=normalized,
                customer_uses=await _customer_uses(
                    db, store_id, customer_phone, discount.id
                ),
                now=now,
            )
            applied = evaluate_discount(discount, ctx)
            if applied is not None:
                return discount, applied
        raise _bad_request(INVALID_PROMO_CODE)

    by_id = {discount.id: discount for discount in discounts}
    best: Optional[DiscountResult] = None
    for discount in discounts:
        ctx = DiscountContext(
            lines=lines,
            delivery_fee=delivery_fee,
            customer_uses=await _customer_uses(
                db, store_id, customer_phone, discount.id
            ),
            now=now,
        )
        candidate = best_automatic_discount([discount], ctx)
        if candidate is None:
            continue
        if best is None or candidate.savings(delivery_fee) > best.savings(
            delivery_fee
        ):
            best = candidate
    if best is None:
        return None, None
    return by_id[best.discount_id], best


async def next_order_number(db: AsyncSession, store_id: int) -> int:
    result = await db.execute(
        select(func.coalesce(func.max(Order.order_number), 0)).where(
            Order.store_id == store_id
        )
    )
    return (result.scalar() or 0) + 1


async def upsert_customer_from_order(
    db: AsyncSession, store_id: int, name: str, phone: str, total: int
) -> Customer:
    """Keep the per-store customer aggregate in step with new orders."""
    now = utc_now()
    result = await db.execute(
        select(Customer).where(Customer.store_id == store_id, Customer.phone == phone)
    )
    customer = result.scalars().first()
    if customer is None:
        customer = Customer(
            store_id=store_id,
            name=name,
            phone=phone,
            total_orders=1,
            total_spent=total,
            first_order_at=now,
            last_order_at=now,
        )
        db.add(customer)
    else:
        customer.name = name
        customer.total_orders = (customer.total_orders or 0) + 1
        customer.total_spent = (customer.total_spent or 0) + total
        customer.last_order_at = now
        if customer.first_order_at is None:
            customer.first_order_at = now
    return customer


async def create_order(
    db: AsyncSession, store: Store, request: CheckoutRequest
) -> Order:
    """Validate the cart, price it and persist the order. Caller commits."""
    if not request.items:
        raise _bad_request("Корзина пуста")
    if request.payment_method is PaymentMethod.KASPI and not is_kaspi_available(
        store.settings
    ):
        raise _bad_request("Оплата через Kaspi недоступна")
    phone = normalize_kz_phone(request.customer_phone)
    if not phone:
        raise _bad_request(INVALID_PHONE)

    products = await _load_products(db, store.id, request.items)
    snapshot, lines = snapshot_items(request.items, products)
    subtotal = sum(line.amount for line in lines)
    fulfillment_type, delivery_fee = resolve_fulfillment(
        store, request.fulfillment_type, subtotal
    )

    discount, applied = await choose_discount(
        db,
        store.id,
        phone,
        lines,
        delivery_fee,
        request.discount_code,
    )
    fee_before_discount = delivery_fee
    discount_amount = 0
    if applied is not None:
        discount_amount = min(applied.amount, subtotal)
        if applied.free_delivery:
            delivery_fee = 0

    order = Order(
        store_id=store.id,
        order_number=await next_order_number(db, store.id),
        customer_name=request.customer_name,
        customer_phone=phone,
        customer_address=request.customer_address or None,
        customer_comment=request.customer_comment or None,
        items=snapshot,
        subtotal=subtotal,
        discount_amount=discount_amount,
        delivery_fee=delivery_fee,
        total=subtotal - discount_amount + delivery_fee,
        discount_code=discount.code if discount is not None else None,
        discount_id=discount.id if discount is not None else None,
        payment_method=request.payment_method,
        fulfillment_type=fulfillment_type,
    )
    db.add(order)

    if discount is not None and applied is not None:
        discount.usage_count = (discount.usage_count or 0) + 1
        discount.total_discounted = (discount.total_discounted or 0) + (
            applied.savings(fee_before_discount)
        )

    await upsert_customer_from_order(
        db, store.id, request.customer_name, phone, order.total
    )
    await db.flush()
    logger.info(
        f"Order #{order.order_number} created for store {store.id}, total {order.total}"
    )
    return order


def invoice_url(store: Store, order: Order) -> str:
    base = get_settings().PUBLIC_BASE_URL.rstrip("/")
    return f"{base}/invoice/{store.slug}/{order.order_number}"


def whatsapp_checkout_link(store: Store, order: Order) -> str:
    """Deep link that opens WhatsApp with the rendered order message."""
    template = store.settings.whatsapp_template if store.settings else None
    message = render_order_message(
        template or DEFAULT_WHATSAPP_TEMPLATE, store.name, order
    )
    message = append_invoice_link(message, invoice_url(store, order))
    return build_whatsapp_link(store.whatsapp_phone, message)
