"""Owner catalog routes: categories and products."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.db.session import get_async_db
from services.storefront_service.models import Category, Product, Store
from services.storefront_service.routers._helpers import get_my_store, not_found
from services.storefront_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    OkResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.storefront_service.services.stores import ensure_product_capacity
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["catalog"])

CATEGORY_NOT_FOUND = "Категория не найдена"
PRODUCT_NOT_FOUND = "Товар не найден"


async def _get_category(db: AsyncSession, store: Store, category_id: int) -> Category:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.store_id == store.id)
    )
    category = result.scalar_one_or_none()
    if not category:
        raise not_found(CATEGORY_NOT_FOUND)
    return category


async def _get_product(db: AsyncSession, store: Store, product_id: int) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.store_id == store.id)
    )
    product = result.scalar_one_or_none()
    if not product:
        raise not_found(PRODUCT_NOT_FOUND)
    return product


async def _check_category(
    db: AsyncSession, store: Store, category_id: Optional[int]
) -> None:
    """A product may only point at a category of its own store."""
    if category_id is None:
        return
    result = await db.execute(
        select(Category.id).where(
            Category.id == category_id, Category.store_id == store.id
        )
    )
    if result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=CATEGORY_NOT_FOUND
        )


# ============================================================================
# CATEGORIES
# ============================================================================


@router.get("/my-store/categories", response_model=list[CategoryResponse])
async def list_categories(
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """List all categories (including inactive)."""
    result = await db.execute(
        select(Category)
        .where(Category.store_id == store.id)
        .order_by(Category.sort_order, Category.id)
    )
    return result.scalars().all()


@router.post(
    "/my-store/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    category_in: CategoryCreate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a category."""
    category = Category(store_id=store.id, **category_in.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


@router.patch("/my-store/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a category."""
    category = await _get_category(db, store, category_id)
    for field, value in category_in.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "is_active", "sort_order"):
            continue
        setattr(category, field, value)
    await db.commit()
    await db.refresh(category)
    return category


@router.delete("/my-store/categories/{category_id}", response_model=OkResponse)
async def delete_category(
    category_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a category; its products become uncategorized."""
    category = await _get_category(db, store, category_id)
    await db.delete(category)
    await db.commit()
    return OkResponse()


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/my-store/products", response_model=list[ProductResponse])
async def list_products(
    category_id: Optional[int] = None,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """List all products (including inactive)."""
    query = select(Product).where(Product.store_id == store.id)
    if category_id is not None:
        query = query.where(Product.category_id == category_id)
    result = await db.execute(query.order_by(Product.sort_order, Product.id))
    return result.scalars().all()


@router.post(
    "/my-store/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    product_in: ProductCreate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a product within the plan's product limit."""
    await ensure_product_capacity(db, store)
    await _check_category(db, store, product_in.category_id)

    product = Product(store_id=store.id, **product_in.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return product


@router.patch("/my-store/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a product. Send ``categoryId: null`` to uncategorize it."""
    product = await _get_product(db, store, product_id)
    update_data = product_in.model_dump(exclude_unset=True)
    if update_data.get("category_id") is not None:
        await _check_category(db, store, update_data["category_id"])

    for field, value in update_data.items():
        if value is None and field in ("name", "price", "is_active", "sort_order"):
            continue
        if field == "image_urls" and value is None:
            value = []
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/my-store/products/{product_id}", response_model=OkResponse)
async def delete_product(
    product_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a product. Past orders keep their snapshot."""
    product = await _get_product(db, store, product_id)
    await db.delete(product)
    await db.commit()
    return OkResponse()
