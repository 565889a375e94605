"""Order status rules and labels.

The primary status follows ``pending -> confirmed -> completed``, and
``cancelled`` can be reached from any non-terminal state. Payment and
fulfillment status are separate axes: they accept any of their values and
never move, or get moved by, the primary status.
"""

from typing import Optional

from fastapi import HTTPException, status
from services.storefront_service.models.enums import (
    FulfillmentStatus,
    OrderStatus,
    PaymentStatus,
)

ORDER_STATUS_LABELS: dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Новый",
    OrderStatus.CONFIRMED: "Подтверждён",
    OrderStatus.COMPLETED: "Выполнен",
    OrderStatus.CANCELLED: "Отменён",
}

PAYMENT_STATUS_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.UNPAID: "Не оплачен",
    PaymentStatus.CONFIRMING: "Подтверждается",
    PaymentStatus.PARTIALLY_PAID: "Частично оплачен",
    PaymentStatus.PAID: "Оплачен",
    PaymentStatus.REFUNDED: "Возврат",
    PaymentStatus.VOIDED: "Аннулирован",
}

FULFILLMENT_STATUS_LABELS: dict[FulfillmentStatus, str] = {
    FulfillmentStatus.UNFULFILLED: "Не выполнен",
    FulfillmentStatus.PARTIALLY_FULFILLED: "Частично выполнен",
    FulfillmentStatus.FULFILLED: "Выполнен",
}

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

for _enum, _table in (
    (OrderStatus, ORDER_STATUS_LABELS),
    (PaymentStatus, PAYMENT_STATUS_LABELS),
    (FulfillmentStatus, FULFILLMENT_STATUS_LABELS),
    (OrderStatus, ALLOWED_TRANSITIONS),
):
    if set(_enum) != set(_table):
        raise RuntimeError(f"Status table for {_enum.__name__} is incomplete")


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Same-status updates are allowed as no-ops."""
    return current == target or target in ALLOWED_TRANSITIONS[current]


def validate_transition(current: OrderStatus, target: Optional[OrderStatus]) -> None:
    """Raise 400 when the primary status cannot move to ``target``."""
    if target is None or can_transition(current, target):
        return
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=(
            f"Нельзя изменить статус заказа с «{ORDER_STATUS_LABELS[current]}» "
            f"на «{ORDER_STATUS_LABELS[target]}»"
        ),
    )


def apply_status_update(order, changes: dict) -> dict:
    """Apply the status fields present in ``changes`` to ``order``.

    Each axis is touched only when its own key is present. Returns the
    fields that actually changed.
    """
    applied = {}
    if changes.get("status") is not None:
        target = OrderStatus(changes["status"])
        validate_transition(OrderStatus(order.status), target)
        if target != order.status:
            order.status = target
            applied["status"] = target
    if changes.get("payment_status") is not None:
        target = PaymentStatus(changes["payment_status"])
        if target != order.payment_status:
            order.payment_status = target
            applied["payment_status"] = target
    if changes.get("fulfillment_status") is not None:
        target = FulfillmentStatus(changes["fulfillment_status"])
        if target != order.fulfillment_status:
            order.fulfillment_status = target
            applied["fulfillment_status"] = target
    return applied
