"""Order, checkout and invoice schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field
from services.storefront_service.models.enums import (
    FulfillmentStatus,
    FulfillmentType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.storefront_service.schemas.common import CamelModel


class OrderItemSnapshot(CamelModel):
    product_id: Optional[int] = None
    name: str
    quantity: int
    price: int
    image_url: Optional[str] = None


class OrderResponse(CamelModel):
    id: int
    store_id: int
    order_number: int
    customer_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    customer_comment: Optional[str] = None
    items: list[OrderItemSnapshot]
    subtotal: int
    discount_amount: int
    delivery_fee: int
    total: int
    discount_code: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    fulfillment_type: Optional[FulfillmentType] = None
    status: OrderStatus
    payment_status: PaymentStatus
    fulfillment_status: FulfillmentStatus
    internal_note: Optional[str] = None
    created_at: Optional[datetime] = None


class OrderUpdate(CamelModel):
    """Each status axis changes only when its own field is sent."""

    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    fulfillment_status: Optional[FulfillmentStatus] = None
    internal_note: Optional[str] = Field(None, max_length=2000)


# ============================================================================
# CHECKOUT
# ============================================================================


class CheckoutItemRequest(CamelModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=999)


class CheckoutOrderRequest(CamelModel):
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_phone: str = Field(..., min_length=5, max_length=30)
    customer_address: Optional[str] = Field(None, max_length=500)
    customer_comment: Optional[str] = Field(None, max_length=1000)
    items: list[CheckoutItemRequest] = Field(..., min_length=1)
    discount_code: Optional[str] = Field(None, max_length=50)
    payment_method: PaymentMethod = PaymentMethod.WHATSAPP
    fulfillment_type: Optional[FulfillmentType] = None


class CheckoutResponse(CamelModel):
    order: OrderResponse
    whatsapp_url: str
    invoice_url: str


# ============================================================================
# INVOICE
# ============================================================================


class InvoiceStore(CamelModel):
    name: str
    slug: str
    whatsapp_phone: str
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None


class KaspiBlock(CamelModel):
    pay_url: str
    recipient_name: Optional[str] = None
    amount: int
    amount_formatted: str
    instructions: list[str]


class InvoiceResponse(CamelModel):
    order: OrderResponse
    store: InvoiceStore
    status_label: str
    payment_status_label: str
    total_formatted: str
    kaspi: Optional[KaspiBlock] = None
