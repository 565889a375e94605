"""Storefront service routers package."""

from services.storefront_service.routers.auth import router as auth_router
from services.storefront_service.routers.catalog import router as catalog_router
from services.storefront_service.routers.customers import router as customers_router
from services.storefront_service.routers.discounts import router as discounts_router
from services.storefront_service.routers.orders import router as orders_router
from services.storefront_service.routers.public import router as public_router
from services.storefront_service.routers.stores import router as stores_router
from services.storefront_service.routers.superadmin import (
    router as superadmin_router,
)

__all__ = [
    "auth_router",
    "catalog_router",
    "customers_router",
    "discounts_router",
    "orders_router",
    "public_router",
    "stores_router",
    "superadmin_router",
]
