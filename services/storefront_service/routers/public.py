"""Public routes: storefront, checkout, invoices and platform lookups.

None of these need a signed-in user except uploads. Anonymous writes
(orders, funnel events) are rate limited per client IP.
"""

from fastapi import (
    APIRouter,
    Depends,
    File,
    Query,
    Request,
    UploadFile,
    status,
)
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.currency import format_price
from libs.common.rate_limit import public_limit
from libs.db.session import get_async_db
from services.storefront_service.models import (
    Category,
    Order,
    OrderStatus,
    PaymentStatus,
    Plan,
    Product,
    Store,
    StoreEventType,
)
from services.storefront_service.routers._helpers import get_geo_client, not_found
from services.storefront_service.schemas import (
    CheckoutOrderRequest,
    CheckoutResponse,
    EventCreate,
    GeocodeResponse,
    InvoiceResponse,
    InvoiceStore,
    KaspiBlock,
    MapsKeyResponse,
    OkResponse,
    OrderResponse,
    PlatformPixelsResponse,
    PublicDelivery,
    PublicSettingsResponse,
    PublicStore,
    StorefrontResponse,
    SuggestResponse,
    TariffCard,
    ThemeResponse,
    UploadResponse,
)
from services.storefront_service.services.business_types import get_business_labels
from services.storefront_service.services.checkout import (
    CheckoutItem,
    CheckoutRequest,
    create_order,
    invoice_url,
    whatsapp_checkout_link,
)
from services.storefront_service.services.kaspi import build_kaspi_block
from services.storefront_service.services.order_status import (
    ORDER_STATUS_LABELS,
    PAYMENT_STATUS_LABELS,
)
from services.storefront_service.services.pixels import (
    PixelRegistry,
    get_pixel_registry,
)
from services.storefront_service.services.stores import (
    get_store_by_slug,
    get_tariff_overrides,
    record_event,
)
from services.storefront_service.services.uploads import save_images
from services.storefront_service.services.usage import tariff_card
from services.storefront_service.services.waba import (
    get_waba_config,
    send_order_notification,
)
from services.storefront_service.services.yandex_geo import YandexGeoClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["public"])

ORDER_NOT_FOUND = "Заказ не найден"


async def _get_active_store(db: AsyncSession, slug: str) -> Store:
    store = await get_store_by_slug(db, slug)
    if store is None or not store.is_active:
        raise not_found()
    return store


# ============================================================================
# STOREFRONT
# ============================================================================


@router.get("/storefront/{slug}", response_model=StorefrontResponse)
async def get_storefront(slug: str, db: AsyncSession = Depends(get_async_db)):
    """Everything the public storefront renders. Counts as a visit."""
    store = await _get_active_store(db, slug)

    categories = await db.execute(
        select(Category)
        .where(Category.store_id == store.id, Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.id)
    )
    products = await db.execute(
        select(Product)
        .where(Product.store_id == store.id, Product.is_active.is_(True))
        .order_by(Product.sort_order, Product.id)
    )

    response = StorefrontResponse(
        store=PublicStore.model_validate(store),
        theme=ThemeResponse.model_validate(store.theme) if store.theme else None,
        settings=(
            PublicSettingsResponse.model_validate(store.settings)
            if store.settings
            else None
        ),
        delivery=(
            PublicDelivery.model_validate(store.delivery) if store.delivery else None
        ),
        labels=get_business_labels(store.business_type).to_dict(),
        categories=list(categories.scalars().all()),
        products=list(products.scalars().all()),
    )

    record_event(db, store.id, StoreEventType.VISIT)
    await db.commit()
    return response


@router.post(
    "/storefront/{slug}/event",
    response_model=OkResponse,
    status_code=status.HTTP_201_CREATED,
)
@public_limit
async def track_event(
    request: Request,
    slug: str,
    event_in: EventCreate,
    db: AsyncSession = Depends(get_async_db),
):
    """Record a storefront funnel event."""
    store = await _get_active_store(db, slug)
    record_event(db, store.id, event_in.event_type, event_in.meta_json)
    await db.commit()
    return OkResponse()


@router.post(
    "/storefront/{slug}/order",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
@public_limit
async def place_order(
    request: Request,
    slug: str,
    order_in: CheckoutOrderRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Check out a cart. Returns the WhatsApp link and the invoice URL."""
    store = await _get_active_store(db, slug)
    order = await create_order(
        db,
        store,
        CheckoutRequest(
            customer_name=order_in.customer_name.strip(),
            customer_phone=order_in.customer_phone.strip(),
            items=[
                CheckoutItem(product_id=item.product_id, quantity=item.quantity)
                for item in order_in.items
            ],
            customer_address=order_in.customer_address,
            customer_comment=order_in.customer_comment,
            discount_code=order_in.discount_code,
            payment_method=order_in.payment_method,
            fulfillment_type=order_in.fulfillment_type,
        ),
    )
    await db.commit()
    await db.refresh(order)

    waba = await get_waba_config(db)
    if waba.is_configured:
        await send_order_notification(db, store, order)
        await db.commit()

    return CheckoutResponse(
        order=OrderResponse.model_validate(order),
        whatsapp_url=whatsapp_checkout_link(store, order),
        invoice_url=invoice_url(store, order),
    )


# ============================================================================
# ORDERS & INVOICES
# ============================================================================


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_public_order(order_id: int, db: AsyncSession = Depends(get_async_db)):
    """Get an order by id."""
    order = await db.get(Order, order_id)
    if order is None:
        raise not_found(ORDER_NOT_FOUND)
    return order


@router.get("/orders/{slug}/{order_number}", response_model=InvoiceResponse)
async def get_invoice(
    slug: str, order_number: int, db: AsyncSession = Depends(get_async_db)
):
    """Invoice page data, with Kaspi payment instructions when enabled."""
    store = await get_store_by_slug(db, slug)
    if store is None:
        raise not_found()
    result = await db.execute(
        select(Order).where(
            Order.store_id == store.id, Order.order_number == order_number
        )
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise not_found(ORDER_NOT_FOUND)

    kaspi = build_kaspi_block(store.settings, order.total)
    return InvoiceResponse(
        order=OrderResponse.model_validate(order),
        store=InvoiceStore(
            name=store.name,
            slug=store.slug,
            whatsapp_phone=store.whatsapp_phone,
            logo_url=store.theme.logo_url if store.theme else None,
            primary_color=store.theme.primary_color if store.theme else None,
        ),
        status_label=ORDER_STATUS_LABELS[OrderStatus(order.status)],
        payment_status_label=PAYMENT_STATUS_LABELS[PaymentStatus(order.payment_status)],
        total_formatted=format_price(order.total),
        kaspi=KaspiBlock.model_validate(kaspi) if kaspi else None,
    )


# ============================================================================
# PLATFORM
# ============================================================================


@router.get("/tariffs", response_model=list[TariffCard])
async def list_tariffs(db: AsyncSession = Depends(get_async_db)):
    """Plans with prices, features and limits."""
    overrides = await get_tariff_overrides(db)
    return [TariffCard.model_validate(tariff_card(plan, overrides)) for plan in Plan]


@router.get("/platform-pixels", response_model=PlatformPixelsResponse)
async def get_platform_pixels(
    db: AsyncSession = Depends(get_async_db),
    registry: PixelRegistry = Depends(get_pixel_registry),
):
    """Platform tracking pixel ids and ready-to-inject snippets."""
    pixels = await registry.get(db)
    return PlatformPixelsResponse(
        facebook_pixel_id=pixels.facebook_pixel_id,
        tiktok_pixel_id=pixels.tiktok_pixel_id,
        snippets=pixels.snippets(),
    )


@router.get("/yandex-maps-key", response_model=MapsKeyResponse)
async def get_maps_key():
    """Browser key for Yandex Maps; 404 when maps are not configured."""
    key = get_settings().YANDEX_MAPS_API_KEY
    if not key:
        raise not_found("Ключ Яндекс Карт не настроен")
    return MapsKeyResponse(key=key)


@router.get("/address/suggest", response_model=SuggestResponse)
async def suggest_address(
    text: str = Query("", max_length=200),
    client: YandexGeoClient = Depends(get_geo_client),
):
    """Address autocomplete. ``available`` is false when Yandex is unusable."""
    result = await client.suggest(text)
    return SuggestResponse(
        available=result.available,
        suggestions=[
            {"display_name": s.display_name, "value": s.value}
            for s in result.suggestions
        ],
    )


@router.get("/address/geocode", response_model=GeocodeResponse)
async def geocode_address(
    address: str = Query(..., min_length=2, max_length=300),
    client: YandexGeoClient = Depends(get_geo_client),
):
    """Coordinates ``[lon, lat]`` for an address."""
    point = await client.geocode(address)
    if point is None:
        raise not_found("Адрес не найден")
    return GeocodeResponse(address=point.address, coordinates=point.coordinates)


@router.post("/upload", response_model=UploadResponse)
async def upload_images(
    files: list[UploadFile] = File(...),
    current_user: AuthUser = Depends(get_current_user),
):
    """Store up to five images and return their public URLs."""
    return UploadResponse(urls=await save_images(files))
