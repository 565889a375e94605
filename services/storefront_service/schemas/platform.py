"""Superadmin console and public platform schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field
from services.storefront_service.models.enums import (
    BroadcastStatus,
    MessageStatus,
    MessageType,
    Plan,
    StoreEventType,
)
from services.storefront_service.schemas.common import CamelModel
from services.storefront_service.schemas.customer import CustomerResponse
from services.storefront_service.schemas.order import OrderResponse
from services.storefront_service.schemas.store import (
    SettingsResponse,
    StoreResponse,
    ThemeResponse,
)

# ============================================================================
# TARIFFS & PIXELS
# ============================================================================


class TariffCard(CamelModel):
    plan: Plan
    name: str
    price: int
    features: list[str]
    product_limit: int
    order_limit: int
    image_limit: int


class TariffUpdate(CamelModel):
    """Override for one plan. ``-1`` limits mean unlimited."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[int] = Field(None, ge=0)
    features: Optional[list[str]] = None
    product_limit: Optional[int] = Field(None, ge=-1)
    order_limit: Optional[int] = Field(None, ge=-1)
    image_limit: Optional[int] = Field(None, ge=-1)


class TrackingPixelsSchema(CamelModel):
    facebook_pixel_id: Optional[str] = Field(None, max_length=50)
    tiktok_pixel_id: Optional[str] = Field(None, max_length=50)


class PlatformPixelsResponse(TrackingPixelsSchema):
    snippets: list[str] = Field(default_factory=list)


class MapsKeyResponse(CamelModel):
    key: str


# ============================================================================
# ADDRESS & UPLOADS
# ============================================================================


class SuggestionSchema(CamelModel):
    display_name: str
    value: str


class SuggestResponse(CamelModel):
    available: bool
    suggestions: list[SuggestionSchema]


class GeocodeResponse(CamelModel):
    address: str
    coordinates: list[float]


class UploadResponse(CamelModel):
    urls: list[str]


# ============================================================================
# STORES
# ============================================================================


class AdminStoreResponse(StoreResponse):
    owner_email: Optional[str] = None
    products_count: int = 0
    orders_count: int = 0
    revenue: int = 0
    customers_count: int = 0


class TopProduct(CamelModel):
    name: str
    quantity: int
    revenue: int


class AdminStoreDetailResponse(CamelModel):
    store: AdminStoreResponse
    settings: Optional[SettingsResponse] = None
    theme: Optional[ThemeResponse] = None
    recent_orders: list[OrderResponse]
    recent_customers: list[CustomerResponse]
    top_products: list[TopProduct]


class PlanUpdate(CamelModel):
    plan: Plan
    plan_expires_at: Optional[datetime] = None


class ActiveUpdate(CamelModel):
    is_active: bool


class AdminOrderResponse(OrderResponse):
    store_name: Optional[str] = None
    store_slug: Optional[str] = None


# ============================================================================
# USERS & EVENTS
# ============================================================================


class AdminUserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_super_admin: bool
    created_at: Optional[datetime] = None
    store_id: Optional[int] = None
    store_name: Optional[str] = None
    store_slug: Optional[str] = None


class SuperadminUpdate(CamelModel):
    is_super_admin: bool


class PlatformEventResponse(CamelModel):
    id: int
    store_id: int
    store_name: str
    event_type: StoreEventType
    meta_json: Optional[dict] = None
    created_at: Optional[datetime] = None


# ============================================================================
# ANALYTICS
# ============================================================================


class PlanCount(CamelModel):
    plan: str
    count: int


class TypeCount(CamelModel):
    type: str
    count: int


class PlatformAnalyticsResponse(CamelModel):
    total_stores: int
    active_stores: int
    total_users: int
    total_orders: int
    total_revenue: int
    total_products: int
    total_customers: int
    stores_by_plan: list[PlanCount]
    stores_by_type: list[TypeCount]
    recent_stores: list[StoreResponse]


# ============================================================================
# MESSAGING
# ============================================================================


class EmailBroadcastRequest(CamelModel):
    subject: str = Field(..., min_length=1, max_length=300)
    html_content: str = Field(..., min_length=1)


class EmailBroadcastResponse(CamelModel):
    id: int
    subject: str
    recipient_count: int
    success_count: int
    fail_count: int
    status: BroadcastStatus
    sent_by: Optional[str] = None
    created_at: Optional[datetime] = None


class WabaConfigUpdate(CamelModel):
    """A blank ``apiKey`` keeps the stored key."""

    api_key: Optional[str] = Field(None, max_length=200)
    sender_phone: Optional[str] = Field(None, max_length=30)
    order_notification_template: Optional[str] = Field(None, max_length=100)
    broadcast_template: Optional[str] = Field(None, max_length=100)
    enabled: Optional[bool] = None


class WabaConfigResponse(CamelModel):
    api_key: Optional[str] = None
    sender_phone: Optional[str] = None
    order_notification_template: str
    broadcast_template: str
    enabled: bool
    is_configured: bool


class WabaTestRequest(CamelModel):
    phone: str = Field(..., min_length=5, max_length=30)
    message: str = Field(..., min_length=1, max_length=4096)


class WhatsappMessageResponse(CamelModel):
    id: int
    store_id: Optional[int] = None
    recipient_phone: str
    message_type: MessageType
    content: Optional[str] = None
    status: MessageStatus
    wamid: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None


class MessageStats(CamelModel):
    total: int
    sent: int
    failed: int


class WabaMessagesResponse(CamelModel):
    messages: list[WhatsappMessageResponse]
    stats: MessageStats


class WabaBroadcastRequest(CamelModel):
    target_type: str = Field(..., pattern=r"^(all_customers|store_customers)$")
    store_id: Optional[int] = None
    message: str = Field(..., min_length=1, max_length=4096)
