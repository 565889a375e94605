"""Store, theme, settings, delivery and usage schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field
from services.storefront_service.models.enums import (
    ButtonStyle,
    CardStyle,
    FontStyle,
    Plan,
)
from services.storefront_service.models.store import DEFAULT_PRIMARY_COLOR
from services.storefront_service.schemas.common import CamelModel

SLUG_PATTERN = r"^[a-z0-9-]+$"
DIGITS_PATTERN = r"^[0-9]+$"
COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


# ============================================================================
# STORE
# ============================================================================


class StoreCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    whatsapp_phone: str = Field(..., min_length=5, max_length=20, pattern=DIGITS_PATTERN)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    business_type: Optional[str] = Field(None, max_length=50)


class StoreResponse(CamelModel):
    id: int
    owner_user_id: str
    name: str
    slug: str
    whatsapp_phone: str
    city: Optional[str] = None
    description: Optional[str] = None
    business_type: Optional[str] = None
    plan: Plan
    plan_started_at: Optional[datetime] = None
    plan_expires_at: Optional[datetime] = None
    is_active: bool
    created_at: Optional[datetime] = None


# ============================================================================
# THEME
# ============================================================================


class ThemeUpdate(CamelModel):
    """Full replacement of the store theme."""

    primary_color: str = Field(DEFAULT_PRIMARY_COLOR, pattern=COLOR_PATTERN)
    secondary_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    banner_overlay: bool = True
    button_style: ButtonStyle = ButtonStyle.PILL
    card_style: CardStyle = CardStyle.BORDERED
    font_style: FontStyle = FontStyle.MODERN


class ThemeResponse(CamelModel):
    store_id: int
    primary_color: str
    secondary_color: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    banner_overlay: bool
    button_style: ButtonStyle
    card_style: CardStyle
    font_style: FontStyle


# ============================================================================
# SETTINGS
# ============================================================================


class SettingsUpdate(CamelModel):
    """Store profile and storefront toggles; only the sent fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    city: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    business_type: Optional[str] = Field(None, max_length=50)
    show_prices: Optional[bool] = None
    instagram_url: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=30)
    checkout_address_enabled: Optional[bool] = None
    checkout_comment_enabled: Optional[bool] = None


class SettingsResponse(CamelModel):
    store_id: int
    show_prices: bool
    currency: str
    whatsapp_template: str
    instagram_url: Optional[str] = None
    phone_number: Optional[str] = None
    checkout_address_enabled: bool
    checkout_comment_enabled: bool
    kaspi_enabled: bool
    kaspi_pay_url: Optional[str] = None
    kaspi_recipient_name: Optional[str] = None


class PublicSettingsResponse(CamelModel):
    """Settings as the storefront sees them."""

    show_prices: bool
    currency: str
    instagram_url: Optional[str] = None
    phone_number: Optional[str] = None
    checkout_address_enabled: bool
    checkout_comment_enabled: bool
    kaspi_enabled: bool


class WhatsappUpdate(CamelModel):
    phone: str = Field(..., min_length=5, max_length=20, pattern=DIGITS_PATTERN)
    template: str = Field(..., min_length=1, max_length=2000)


class WhatsappPreviewResponse(CamelModel):
    template: str
    preview: str
    tokens: list[str]


class KaspiUpdate(CamelModel):
    kaspi_enabled: bool
    kaspi_pay_url: Optional[str] = Field(None, max_length=500)
    kaspi_recipient_name: Optional[str] = Field(None, max_length=200)


# ============================================================================
# DELIVERY
# ============================================================================


class AddressPartsSchema(CamelModel):
    city: str = ""
    street: str = ""
    apartment: str = ""
    floor: str = ""
    intercom: str = ""
    comment: str = ""


class DeliveryUpdate(CamelModel):
    """Full replacement of delivery settings.

    The pickup address may be sent as one string or as parts; parts win.
    """

    pickup_enabled: bool = True
    delivery_enabled: bool = False
    delivery_fee: Optional[int] = Field(None, ge=0)
    delivery_free_threshold: Optional[int] = Field(None, ge=0)
    pickup_address: Optional[str] = Field(None, max_length=500)
    pickup_address_parts: Optional[AddressPartsSchema] = None
    delivery_zone: Optional[str] = Field(None, max_length=1000)
    pickup_coordinates: Optional[list[float]] = Field(None, min_length=2, max_length=2)


class DeliveryResponse(CamelModel):
    store_id: int
    pickup_enabled: bool
    delivery_enabled: bool
    delivery_fee: Optional[int] = None
    delivery_free_threshold: Optional[int] = None
    pickup_address: Optional[str] = None
    pickup_address_parts: AddressPartsSchema
    delivery_zone: Optional[str] = None
    pickup_coordinates: Optional[list[float]] = None
    courier_available: bool = False


class DeliveryQuoteRequest(CamelModel):
    address: str = Field(..., min_length=3, max_length=500)
    coordinates: Optional[list[float]] = Field(None, min_length=2, max_length=2)
    customer_name: str = Field("Покупатель", max_length=200)
    customer_phone: str = Field(..., min_length=5, max_length=30)
    total_cost: int = Field(0, ge=0)


class DeliveryQuoteResponse(CamelModel):
    claim_id: str
    price: int
    price_formatted: str
    currency: str
    status: str


class ClaimAcceptRequest(CamelModel):
    version: int = Field(1, ge=1)


class ClaimCancelRequest(CamelModel):
    version: int = Field(1, ge=1)
    cancel_state: str = Field("free", pattern=r"^(free|paid)$")


# ============================================================================
# USAGE & ANALYTICS
# ============================================================================


class UsageResponse(CamelModel):
    plan: Plan
    plan_name: str
    products: int
    product_limit: int
    monthly_orders: int
    order_limit: int
    total_images: int
    image_limit: int
    banner: Optional[str] = None


class StoreAnalyticsResponse(CamelModel):
    visits: int
    add_to_carts: int
    checkouts: int


class MyStoreResponse(StoreResponse):
    labels: dict
