"""Owner store routes: creation, branding, settings, delivery and usage."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.currency import format_price
from libs.db.session import get_async_db
from services.storefront_service.models import (
    DeliverySettings,
    Store,
    StoreSettings,
    StoreTheme,
)
from services.storefront_service.routers._helpers import (
    delivery_error,
    delivery_response,
    get_delivery_client,
    get_my_store,
    my_store_response,
)
from services.storefront_service.schemas import (
    ClaimAcceptRequest,
    ClaimCancelRequest,
    DeliveryQuoteRequest,
    DeliveryQuoteResponse,
    DeliveryResponse,
    DeliveryUpdate,
    KaspiUpdate,
    MyStoreResponse,
    SettingsResponse,
    SettingsUpdate,
    StoreAnalyticsResponse,
    StoreCreate,
    ThemeResponse,
    ThemeUpdate,
    UsageResponse,
    WhatsappPreviewResponse,
    WhatsappUpdate,
)
from services.storefront_service.services.address import AddressParts, build_address
from services.storefront_service.services.business_types import is_known_business_type
from services.storefront_service.services.stores import (
    create_store,
    ensure_slug_available,
    get_store_analytics,
    get_usage_snapshot,
)
from services.storefront_service.services.usage import PLAN_NAMES, banner_level
from services.storefront_service.services.whatsapp_message import (
    TEMPLATE_TOKENS,
    render_preview,
)
from services.storefront_service.services.yandex_delivery import (
    Contact,
    YandexDeliveryClient,
    YandexDeliveryError,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["stores"])

STORE_FIELDS = ("name", "slug", "city", "description", "business_type")


def _check_business_type(business_type: Optional[str]) -> None:
    if business_type and not is_known_business_type(business_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Неизвестный тип бизнеса",
        )


def _store_settings(store: Store) -> StoreSettings:
    if store.settings is None:
        store.settings = StoreSettings()
    return store.settings


# ============================================================================
# STORE
# ============================================================================


@router.post(
    "/stores", response_model=MyStoreResponse, status_code=status.HTTP_201_CREATED
)
async def create_my_store(
    store_in: StoreCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Create the caller's store with default theme and settings."""
    _check_business_type(store_in.business_type)
    store = await create_store(db, current_user.user_id, store_in.model_dump())
    await db.commit()
    await db.refresh(store)
    return my_store_response(store)


@router.get("/my-store", response_model=MyStoreResponse)
async def get_my_store_info(store: Store = Depends(get_my_store)):
    """Get the caller's store with its business labels."""
    return my_store_response(store)


# ============================================================================
# THEME
# ============================================================================


@router.get("/my-store/theme", response_model=ThemeResponse)
async def get_theme(store: Store = Depends(get_my_store)):
    """Get storefront branding."""
    if store.theme is None:
        return ThemeResponse(store_id=store.id, **ThemeUpdate().model_dump())
    return store.theme


@router.put("/my-store/theme", response_model=ThemeResponse)
async def update_theme(
    theme_in: ThemeUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Replace storefront branding."""
    if store.theme is None:
        store.theme = StoreTheme()
    for field, value in theme_in.model_dump().items():
        setattr(store.theme, field, value)
    await db.commit()
    await db.refresh(store.theme)
    return store.theme


# ============================================================================
# SETTINGS
# ============================================================================


@router.get("/my-store/settings", response_model=SettingsResponse)
async def get_settings_view(
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Get storefront settings."""
    settings = _store_settings(store)
    if settings.id is None:
        await db.commit()
        await db.refresh(settings)
    return settings


@router.put("/my-store/settings", response_model=SettingsResponse)
async def update_settings(
    settings_in: SettingsUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Update store profile and storefront toggles; only sent fields change."""
    update_data = settings_in.model_dump(exclude_unset=True)
    if update_data.get("slug"):
        await ensure_slug_available(db, update_data["slug"], current=store)
    if "business_type" in update_data:
        _check_business_type(update_data["business_type"])

    settings = _store_settings(store)
    for field, value in update_data.items():
        if field in STORE_FIELDS:
            if field in ("name", "slug") and not value:
                continue
            setattr(store, field, value)
        else:
            setattr(settings, field, value)

    await db.commit()
    await db.refresh(settings)
    return settings


@router.put("/my-store/whatsapp", response_model=SettingsResponse)
async def update_whatsapp(
    whatsapp_in: WhatsappUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Set the order phone number and message template."""
    settings = _store_settings(store)
    store.whatsapp_phone = whatsapp_in.phone
    settings.whatsapp_template = whatsapp_in.template
    await db.commit()
    await db.refresh(settings)
    return settings


@router.get("/my-store/whatsapp/preview", response_model=WhatsappPreviewResponse)
async def preview_whatsapp(
    template: Optional[str] = None,
    store: Store = Depends(get_my_store),
):
    """Render a template (the saved one by default) against sample data."""
    settings = _store_settings(store)
    template = template if template is not None else settings.whatsapp_template
    return WhatsappPreviewResponse(
        template=template,
        preview=render_preview(template, store.name),
        tokens=list(TEMPLATE_TOKENS),
    )


@router.put("/my-store/kaspi", response_model=SettingsResponse)
async def update_kaspi(
    kaspi_in: KaspiUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Configure the Kaspi Pay link shown on invoices."""
    pay_url = (kaspi_in.kaspi_pay_url or "").strip() or None
    if kaspi_in.kaspi_enabled and not pay_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Укажите ссылку на платеж Kaspi",
        )
    settings = _store_settings(store)
    settings.kaspi_enabled = kaspi_in.kaspi_enabled
    settings.kaspi_pay_url = pay_url
    settings.kaspi_recipient_name = (kaspi_in.kaspi_recipient_name or "").strip() or None
    await db.commit()
    await db.refresh(settings)
    return settings


# ============================================================================
# DELIVERY
# ============================================================================


@router.get("/my-store/delivery", response_model=DeliveryResponse)
async def get_delivery(store: Store = Depends(get_my_store)):
    """Get pickup and delivery settings with the parsed pickup address."""
    return delivery_response(store)


@router.put("/my-store/delivery", response_model=DeliveryResponse)
async def update_delivery(
    delivery_in: DeliveryUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Replace pickup and delivery settings."""
    data = delivery_in.model_dump(exclude={"pickup_address_parts"})
    if delivery_in.pickup_address_parts is not None:
        data["pickup_address"] = build_address(
            AddressParts(**delivery_in.pickup_address_parts.model_dump())
        )
    data["pickup_address"] = (data.get("pickup_address") or "").strip() or None

    if store.delivery is None:
        store.delivery = DeliverySettings()
    for field, value in data.items():
        setattr(store.delivery, field, value)
    await db.commit()
    await db.refresh(store.delivery)
    return delivery_response(store)


@router.post("/my-store/delivery/quote", response_model=DeliveryQuoteResponse)
async def quote_delivery(
    quote_in: DeliveryQuoteRequest,
    store: Store = Depends(get_my_store),
    client: YandexDeliveryClient = Depends(get_delivery_client),
):
    """Ask Yandex Delivery for a courier price from the pickup point."""
    delivery = store.delivery
    if delivery is None or not delivery.pickup_address or not delivery.pickup_coordinates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Укажите адрес и координаты точки самовывоза",
        )
    try:
        estimate = await client.estimate(
            pickup_address=delivery.pickup_address,
            pickup_coordinates=delivery.pickup_coordinates,
            pickup_contact=Contact(name=store.name, phone=store.whatsapp_phone),
            dropoff_address=quote_in.address,
            dropoff_contact=Contact(
                name=quote_in.customer_name, phone=quote_in.customer_phone
            ),
            total_cost=quote_in.total_cost,
            dropoff_coordinates=quote_in.coordinates,
        )
    except YandexDeliveryError as e:
        raise delivery_error(e)
    return DeliveryQuoteResponse(
        claim_id=estimate.claim_id,
        price=estimate.price,
        price_formatted=format_price(estimate.price),
        currency=estimate.currency,
        status=estimate.status,
    )


@router.get("/my-store/delivery/claims/{claim_id}")
async def get_claim(
    claim_id: str,
    store: Store = Depends(get_my_store),
    client: YandexDeliveryClient = Depends(get_delivery_client),
):
    """Raw Yandex claim info."""
    try:
        return await client.get_claim_info(claim_id)
    except YandexDeliveryError as e:
        raise delivery_error(e)


@router.post("/my-store/delivery/claims/{claim_id}/accept")
async def accept_claim(
    claim_id: str,
    accept_in: ClaimAcceptRequest,
    store: Store = Depends(get_my_store),
    client: YandexDeliveryClient = Depends(get_delivery_client),
):
    """Confirm a quoted claim so a courier is dispatched."""
    try:
        return await client.accept_claim(claim_id, accept_in.version)
    except YandexDeliveryError as e:
        raise delivery_error(e)


@router.post("/my-store/delivery/claims/{claim_id}/cancel")
async def cancel_claim(
    claim_id: str,
    cancel_in: ClaimCancelRequest,
    store: Store = Depends(get_my_store),
    client: YandexDeliveryClient = Depends(get_delivery_client),
):
    """Cancel a claim."""
    try:
        return await client.cancel_claim(
            claim_id, cancel_state=cancel_in.cancel_state, version=cancel_in.version
        )
    except YandexDeliveryError as e:
        raise delivery_error(e)


# ============================================================================
# USAGE & ANALYTICS
# ============================================================================


@router.get("/my-store/usage", response_model=UsageResponse)
async def get_usage(
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Plan usage with the upgrade banner level."""
    snapshot = await get_usage_snapshot(db, store)
    banner = banner_level(snapshot)
    return UsageResponse(
        plan=snapshot.plan,
        plan_name=PLAN_NAMES[snapshot.plan],
        products=snapshot.products,
        product_limit=snapshot.product_limit,
        monthly_orders=snapshot.monthly_orders,
        order_limit=snapshot.order_limit,
        total_images=snapshot.total_images,
        image_limit=snapshot.image_limit,
        banner=banner.value if banner else None,
    )


@router.get("/my-store/analytics", response_model=StoreAnalyticsResponse)
async def get_analytics(
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Storefront funnel counts for the last 30 days."""
    return StoreAnalyticsResponse.model_validate(await get_store_analytics(db, store.id))
