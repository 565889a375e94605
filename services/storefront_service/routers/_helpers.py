"""Shared dependencies and response builders for storefront routers."""

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.models import DeliverySettings, Store, User
from services.storefront_service.schemas import (
    AddressPartsSchema,
    DeliveryResponse,
    MyStoreResponse,
    StoreResponse,
)
from services.storefront_service.services.accounts import get_user
from services.storefront_service.services.address import parse_address
from services.storefront_service.services.business_types import get_business_labels
from services.storefront_service.services.stores import (
    STORE_NOT_FOUND,
    get_store_by_owner,
)
from services.storefront_service.services.yandex_delivery import (
    YandexDeliveryClient,
    YandexDeliveryError,
    YandexDeliveryNotConfigured,
    is_delivery_available,
)
from services.storefront_service.services.yandex_geo import YandexGeoClient
from sqlalchemy.ext.asyncio import AsyncSession


def not_found(detail: str = STORE_NOT_FOUND) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


async def get_my_store(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> Store:
    """The store owned by the caller; 404 when they have none yet."""
    store = await get_store_by_owner(db, current_user.user_id)
    if store is None:
        raise not_found()
    return store


async def require_superadmin(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    user = await get_user(db, current_user.user_id)
    if user is None or not user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Доступ запрещён"
        )
    return user


def get_delivery_client() -> YandexDeliveryClient:
    """Yandex Delivery client; 503 while the integration is not configured."""
    try:
        return YandexDeliveryClient()
    except YandexDeliveryNotConfigured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Доставка Яндекс не настроена",
        )


def delivery_error(exc: YandexDeliveryError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)


def my_store_response(store: Store) -> MyStoreResponse:
    return MyStoreResponse(
        **StoreResponse.model_validate(store).model_dump(),
        labels=get_business_labels(store.business_type).to_dict(),
    )


def delivery_response(store: Store) -> DeliveryResponse:
    delivery = store.delivery or DeliverySettings(
        store_id=store.id, pickup_enabled=True, delivery_enabled=False
    )
    return DeliveryResponse(
        store_id=store.id,
        pickup_enabled=delivery.pickup_enabled,
        delivery_enabled=delivery.delivery_enabled,
        delivery_fee=delivery.delivery_fee,
        delivery_free_threshold=delivery.delivery_free_threshold,
        pickup_address=delivery.pickup_address,
        pickup_address_parts=AddressPartsSchema(
            **parse_address(delivery.pickup_address).to_dict()
        ),
        delivery_zone=delivery.delivery_zone,
        pickup_coordinates=delivery.pickup_coordinates,
        courier_available=is_delivery_available(),
    )


def get_geo_client() -> YandexGeoClient:
    return YandexGeoClient()
