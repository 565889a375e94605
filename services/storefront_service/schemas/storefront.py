"""Public storefront schemas."""

from typing import Any, Optional

from services.storefront_service.models.enums import StoreEventType
from services.storefront_service.schemas.catalog import (
    CategoryResponse,
    ProductResponse,
)
from services.storefront_service.schemas.common import CamelModel
from services.storefront_service.schemas.store import (
    PublicSettingsResponse,
    ThemeResponse,
)


class PublicStore(CamelModel):
    id: int
    name: str
    slug: str
    whatsapp_phone: str
    city: Optional[str] = None
    description: Optional[str] = None
    business_type: Optional[str] = None


class PublicDelivery(CamelModel):
    pickup_enabled: bool
    delivery_enabled: bool
    delivery_fee: Optional[int] = None
    delivery_free_threshold: Optional[int] = None
    pickup_address: Optional[str] = None
    delivery_zone: Optional[str] = None


class StorefrontResponse(CamelModel):
    store: PublicStore
    theme: Optional[ThemeResponse] = None
    settings: Optional[PublicSettingsResponse] = None
    delivery: Optional[PublicDelivery] = None
    labels: dict
    categories: list[CategoryResponse]
    products: list[ProductResponse]


class EventCreate(CamelModel):
    event_type: StoreEventType
    meta_json: Optional[dict[str, Any]] = None
