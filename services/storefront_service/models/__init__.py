"""Storefront Service models package.

Re-exports all models and enums so that:
  - ``from services.storefront_service.models import Store`` works
  - Alembic env.py sees every table through one import
  - SQLAlchemy's mapper registry sees every model class on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.storefront_service.models.catalog import Category, Product
from services.storefront_service.models.commerce import (
    Customer,
    Discount,
    Order,
    StoreEvent,
)
from services.storefront_service.models.enums import (
    BroadcastStatus,
    ButtonStyle,
    CardStyle,
    DiscountAppliesTo,
    DiscountType,
    DiscountValueType,
    FontStyle,
    FulfillmentStatus,
    FulfillmentType,
    MessageStatus,
    MessageType,
    MinRequirement,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Plan,
    StoreEventType,
)
from services.storefront_service.models.platform import (
    EmailBroadcast,
    PasswordResetCode,
    PlatformSetting,
    User,
    WhatsappMessage,
)
from services.storefront_service.models.store import (
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_WHATSAPP_TEMPLATE,
    DeliverySettings,
    Store,
    StoreSettings,
    StoreTheme,
)

__all__ = [
    "BroadcastStatus",
    "ButtonStyle",
    "CardStyle",
    "Category",
    "Customer",
    "DEFAULT_PRIMARY_COLOR",
    "DEFAULT_WHATSAPP_TEMPLATE",
    "DeliverySettings",
    "Discount",
    "DiscountAppliesTo",
    "DiscountType",
    "DiscountValueType",
    "EmailBroadcast",
    "FontStyle",
    "FulfillmentStatus",
    "FulfillmentType",
    "MessageStatus",
    "MessageType",
    "MinRequirement",
    "Order",
    "OrderStatus",
    "PasswordResetCode",
    "PaymentMethod",
    "PaymentStatus",
    "Plan",
    "PlatformSetting",
    "Product",
    "Store",
    "StoreEvent",
    "StoreEventType",
    "StoreSettings",
    "StoreTheme",
    "User",
    "WhatsappMessage",
]
