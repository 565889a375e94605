"""Enum definitions for storefront service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class Plan(str, enum.Enum):
    FREE = "free"
    PRO = "pro"
    BUSINESS = "business"


class ButtonStyle(str, enum.Enum):
    PILL = "pill"
    ROUNDED = "rounded"
    SQUARE = "square"


class CardStyle(str, enum.Enum):
    BORDERED = "bordered"
    SHADOW = "shadow"
    FLAT = "flat"


class FontStyle(str, enum.Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    ROUNDED = "rounded"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    CONFIRMING = "confirming"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    REFUNDED = "refunded"
    VOIDED = "voided"


class FulfillmentStatus(str, enum.Enum):
    UNFULFILLED = "unfulfilled"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    FULFILLED = "fulfilled"


class PaymentMethod(str, enum.Enum):
    WHATSAPP = "whatsapp"
    KASPI = "kaspi"
    CASH = "cash"


class FulfillmentType(str, enum.Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class DiscountType(str, enum.Enum):
    CODE = "code"
    ORDER_AMOUNT = "order_amount"
    AUTOMATIC = "automatic"
    BUNDLE = "bundle"
    BUY_X_GET_Y = "buy_x_get_y"
    FREE_DELIVERY = "free_delivery"


class DiscountValueType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE = "free"


class DiscountAppliesTo(str, enum.Enum):
    ORDERS = "orders"
    PRODUCTS = "products"
    CATEGORIES = "categories"


class MinRequirement(str, enum.Enum):
    NONE = "none"
    AMOUNT = "amount"
    QUANTITY = "quantity"


class StoreEventType(str, enum.Enum):
    VISIT = "visit"
    ADD_TO_CART = "add_to_cart"
    CHECKOUT_CLICK = "checkout_click"


class BroadcastStatus(str, enum.Enum):
    SENDING = "sending"
    COMPLETED = "completed"
    FAILED = "failed"


class MessageStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class MessageType(str, enum.Enum):
    TEXT = "text"
    TEMPLATE = "template"
    ORDER_NOTIFICATION = "order_notification"
