"""Commerce models: orders, customers, discounts and storefront events.

- Orders hold an immutable JSON snapshot of the cart at checkout time and
  three independent status axes (order, payment, fulfillment).
- Customers are a denormalized aggregate per (store, phone), updated as
  orders come in.
- Discounts share one row shape for all six discount types.
"""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.storefront_service.models.enums import (
    DiscountAppliesTo,
    DiscountType,
    DiscountValueType,
    FulfillmentStatus,
    FulfillmentType,
    MinRequirement,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    StoreEventType,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# ORDERS
# ============================================================================


class Order(Base):
    """A checkout. Line items are a snapshot and never change afterwards."""

    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("store_id", "order_number", name="uq_orders_store_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), index=True
    )
    order_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # Customer info (as typed at checkout)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(30), nullable=False)
    customer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # [{productId, name, quantity, price, imageUrl}]
    items: Mapped[list] = mapped_column(JSON, nullable=False)

    # Totals (whole tenge)
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_amount: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    delivery_fee: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    discount_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("discounts.id", ondelete="SET NULL"), nullable=True
    )

    payment_method: Mapped[Optional[PaymentMethod]] = mapped_column(
        SAEnum(PaymentMethod, values_callable=enum_values, name="payment_method_enum"),
        nullable=True,
    )
    fulfillment_type: Mapped[Optional[FulfillmentType]] = mapped_column(
        SAEnum(
            FulfillmentType, values_callable=enum_values, name="fulfillment_type_enum"
        ),
        nullable=True,
    )

    # Independent status axes
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, values_callable=enum_values, name="order_status_enum"),
        default=OrderStatus.PENDING,
        server_default=OrderStatus.PENDING.value,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(PaymentStatus, values_callable=enum_values, name="payment_status_enum"),
        default=PaymentStatus.UNPAID,
        server_default=PaymentStatus.UNPAID.value,
    )
    fulfillment_status: Mapped[FulfillmentStatus] = mapped_column(
        SAEnum(
            FulfillmentStatus,
            values_callable=enum_values,
            name="fulfillment_status_enum",
        ),
        default=FulfillmentStatus.UNFULFILLED,
        server_default=FulfillmentStatus.UNFULFILLED.value,
    )

    internal_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )

    store = relationship("Store", back_populates="orders")

    def __repr__(self):
        return f"<Order #{self.order_number} store={self.store_id}>"


# ============================================================================
# CUSTOMERS
# ============================================================================


class Customer(Base):
    """Per-store customer record with running order totals."""

    __tablename__ = "customers"
    __table_args__ = (Index("ix_customers_store_phone", "store_id", "phone"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE")
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    total_orders: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    total_spent: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    first_order_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_order_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    store = relationship("Store", back_populates="customers")


# ============================================================================
# DISCOUNTS
# ============================================================================


class Discount(Base):
    """One row for every discount type; ``type`` decides which fields matter."""

    __tablename__ = "discounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[DiscountType] = mapped_column(
        SAEnum(DiscountType, values_callable=enum_values, name="discount_type_enum"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    # Value
    value_type: Mapped[DiscountValueType] = mapped_column(
        SAEnum(
            DiscountValueType,
            values_callable=enum_values,
            name="discount_value_type_enum",
        ),
        default=DiscountValueType.PERCENTAGE,
    )
    value: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # Targets
    applies_to: Mapped[DiscountAppliesTo] = mapped_column(
        SAEnum(
            DiscountAppliesTo,
            values_callable=enum_values,
            name="discount_applies_to_enum",
        ),
        default=DiscountAppliesTo.ORDERS,
    )
    target_product_ids: Mapped[list] = mapped_column(JSON, default=list)
    target_category_ids: Mapped[list] = mapped_column(JSON, default=list)
    buy_product_ids: Mapped[list] = mapped_column(JSON, default=list)
    get_product_ids: Mapped[list] = mapped_column(JSON, default=list)

    # Conditions
    min_requirement: Mapped[MinRequirement] = mapped_column(
        SAEnum(
            MinRequirement, values_callable=enum_values, name="min_requirement_enum"
        ),
        default=MinRequirement.NONE,
    )
    min_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_total_uses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_per_customer: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_total_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Usage counters
    usage_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    total_discounted: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    store = relationship("Store", back_populates="discounts")

    def __repr__(self):
        return f"<Discount {self.type.value} {self.title}>"


# ============================================================================
# STOREFRONT EVENTS
# ============================================================================


class StoreEvent(Base):
    """Anonymous storefront funnel event (visit, add to cart, checkout click)."""

    __tablename__ = "store_events"
    __table_args__ = (Index("idx_store_events_store", "store_id", "event_type"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE")
    )
    event_type: Mapped[StoreEventType] = mapped_column(
        SAEnum(StoreEventType, values_callable=enum_values, name="store_event_enum"),
        nullable=False,
    )
    meta_json: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )

    store = relationship("Store", back_populates="events")
