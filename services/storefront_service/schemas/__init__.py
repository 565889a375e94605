"""Storefront Service schemas package.

Re-exports all schemas so routers import from one place:
  ``from services.storefront_service.schemas import ProductResponse``

Every schema class must be listed here. When adding a new schema, add its
import and __all__ entry.
"""

from services.storefront_service.schemas.auth import (  # noqa: F401
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from services.storefront_service.schemas.catalog import (  # noqa: F401
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.storefront_service.schemas.common import (  # noqa: F401
    CamelModel,
    OkResponse,
)
from services.storefront_service.schemas.customer import (  # noqa: F401
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
)
from services.storefront_service.schemas.discount import (  # noqa: F401
    DiscountCreate,
    DiscountResponse,
    DiscountUpdate,
)
from services.storefront_service.schemas.order import (  # noqa: F401
    CheckoutItemRequest,
    CheckoutOrderRequest,
    CheckoutResponse,
    InvoiceResponse,
    InvoiceStore,
    KaspiBlock,
    OrderItemSnapshot,
    OrderResponse,
    OrderUpdate,
)
from services.storefront_service.schemas.platform import (  # noqa: F401
    ActiveUpdate,
    AdminOrderResponse,
    AdminStoreDetailResponse,
    AdminStoreResponse,
    AdminUserResponse,
    EmailBroadcastRequest,
    EmailBroadcastResponse,
    GeocodeResponse,
    MapsKeyResponse,
    MessageStats,
    PlanCount,
    PlanUpdate,
    PlatformAnalyticsResponse,
    PlatformEventResponse,
    PlatformPixelsResponse,
    SuggestionSchema,
    SuggestResponse,
    SuperadminUpdate,
    TariffCard,
    TariffUpdate,
    TopProduct,
    TrackingPixelsSchema,
    TypeCount,
    UploadResponse,
    WabaBroadcastRequest,
    WabaConfigResponse,
    WabaConfigUpdate,
    WabaMessagesResponse,
    WabaTestRequest,
    WhatsappMessageResponse,
)
from services.storefront_service.schemas.store import (  # noqa: F401
    AddressPartsSchema,
    ClaimAcceptRequest,
    ClaimCancelRequest,
    DeliveryQuoteRequest,
    DeliveryQuoteResponse,
    DeliveryResponse,
    DeliveryUpdate,
    KaspiUpdate,
    MyStoreResponse,
    PublicSettingsResponse,
    SettingsResponse,
    SettingsUpdate,
    StoreAnalyticsResponse,
    StoreCreate,
    StoreResponse,
    ThemeResponse,
    ThemeUpdate,
    UsageResponse,
    WhatsappPreviewResponse,
    WhatsappUpdate,
)
from services.storefront_service.schemas.storefront import (  # noqa: F401
    EventCreate,
    PublicDelivery,
    PublicStore,
    StorefrontResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "OkResponse",
    # Auth
    "AuthResponse",
    "ForgotPasswordRequest",
    "LoginRequest",
    "PasswordChangeRequest",
    "ProfileUpdate",
    "RegisterRequest",
    "ResetPasswordRequest",
    "UserResponse",
    "VerifyCodeRequest",
    "VerifyCodeResponse",
    # Store
    "AddressPartsSchema",
    "ClaimAcceptRequest",
    "ClaimCancelRequest",
    "DeliveryQuoteRequest",
    "DeliveryQuoteResponse",
    "DeliveryResponse",
    "DeliveryUpdate",
    "KaspiUpdate",
    "MyStoreResponse",
    "PublicSettingsResponse",
    "SettingsResponse",
    "SettingsUpdate",
    "StoreAnalyticsResponse",
    "StoreCreate",
    "StoreResponse",
    "ThemeResponse",
    "ThemeUpdate",
    "UsageResponse",
    "WhatsappPreviewResponse",
    "WhatsappUpdate",
    # Catalog
    "CategoryCreate",
    "CategoryResponse",
    "CategoryUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
    # Discounts
    "DiscountCreate",
    "DiscountResponse",
    "DiscountUpdate",
    # Orders
    "CheckoutItemRequest",
    "CheckoutOrderRequest",
    "CheckoutResponse",
    "InvoiceResponse",
    "InvoiceStore",
    "KaspiBlock",
    "OrderItemSnapshot",
    "OrderResponse",
    "OrderUpdate",
    # Customers
    "CustomerCreate",
    "CustomerResponse",
    "CustomerUpdate",
    # Storefront
    "EventCreate",
    "PublicDelivery",
    "PublicStore",
    "StorefrontResponse",
    # Platform
    "ActiveUpdate",
    "AdminOrderResponse",
    "AdminStoreDetailResponse",
    "AdminStoreResponse",
    "AdminUserResponse",
    "EmailBroadcastRequest",
    "EmailBroadcastResponse",
    "GeocodeResponse",
    "MapsKeyResponse",
    "MessageStats",
    "PlanCount",
    "PlanUpdate",
    "PlatformAnalyticsResponse",
    "PlatformEventResponse",
    "PlatformPixelsResponse",
    "SuggestionSchema",
    "SuggestResponse",
    "SuperadminUpdate",
    "TariffCard",
    "TariffUpdate",
    "TopProduct",
    "TrackingPixelsSchema",
    "TypeCount",
    "UploadResponse",
    "WabaBroadcastRequest",
    "WabaConfigResponse",
    "WabaConfigUpdate",
    "WabaMessagesResponse",
    "WabaTestRequest",
    "WhatsappMessageResponse",
]
