"""Owner discount routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.datetime_utils import ensure_aware
from libs.db.session import get_async_db
from services.storefront_service.models import Discount, DiscountType, Store
from services.storefront_service.routers._helpers import get_my_store, not_found
from services.storefront_service.schemas import (
    DiscountCreate,
    DiscountResponse,
    DiscountUpdate,
    OkResponse,
)
from services.storefront_service.services.discounts import (
    DISCOUNT_TYPE_LABELS,
    format_value,
    normalize_discount_fields,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["discounts"])

DISCOUNT_NOT_FOUND = "Скидка не найдена"


def _discount_response(discount: Discount) -> DiscountResponse:
    response = DiscountResponse.model_validate(discount)
    response.type_label = DISCOUNT_TYPE_LABELS[DiscountType(discount.type)]
    response.value_label = format_value(discount.value_type, discount.value)
    return response


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _get_discount(db: AsyncSession, store: Store, discount_id: int) -> Discount:
    result = await db.execute(
        select(Discount).where(Discount.id == discount_id, Discount.store_id == store.id)
    )
    discount = result.scalar_one_or_none()
    if not discount:
        raise not_found(DISCOUNT_NOT_FOUND)
    return discount


async def _ensure_code_unique(
    db: AsyncSession, store: Store, code: Optional[str], exclude_id: Optional[int] = None
) -> None:
    if not code:
        return
    query = select(Discount.id).where(
        Discount.store_id == store.id, Discount.code == code
    )
    if exclude_id is not None:
        query = query.where(Discount.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise _bad_request("Такой промокод уже существует")


def _check_dates(discount: Discount) -> None:
    if (
        discount.start_date is not None
        and discount.end_date is not None
        and ensure_aware(discount.end_date) < ensure_aware(discount.start_date)
    ):
        raise _bad_request("Дата окончания раньше даты начала")


@router.get("/my-store/discounts", response_model=list[DiscountResponse])
async def list_discounts(
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """List the store's discounts, newest first."""
    result = await db.execute(
        select(Discount)
        .where(Discount.store_id == store.id)
        .order_by(Discount.created_at.desc(), Discount.id.desc())
    )
    return [_discount_response(discount) for discount in result.scalars().all()]


@router.post(
    "/my-store/discounts",
    response_model=DiscountResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_discount(
    discount_in: DiscountCreate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a discount of any type."""
    data = normalize_discount_fields(discount_in.model_dump(), discount_in.type)
    if discount_in.type is DiscountType.CODE and not data.get("code"):
        raise _bad_request("Укажите промокод")
    await _ensure_code_unique(db, store, data.get("code"))

    discount = Discount(store_id=store.id, **data)
    _check_dates(discount)
    db.add(discount)
    await db.commit()
    await db.refresh(discount)
    return _discount_response(discount)


@router.get("/my-store/discounts/{discount_id}", response_model=DiscountResponse)
async def get_discount(
    discount_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Get one discount."""
    return _discount_response(await _get_discount(db, store, discount_id))


@router.patch("/my-store/discounts/{discount_id}", response_model=DiscountResponse)
async def update_discount(
    discount_id: int,
    discount_in: DiscountUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a discount; the type cannot change."""
    discount = await _get_discount(db, store, discount_id)
    discount_type = DiscountType(discount.type)
    data = normalize_discount_fields(
        discount_in.model_dump(exclude_unset=True), discount_type
    )
    if "code" in data:
        if discount_type is DiscountType.CODE and not data["code"]:
            raise _bad_request("Укажите промокод")
        await _ensure_code_unique(db, store, data["code"], exclude_id=discount.id)

    for field, value in data.items():
        if value is None and field in ("title", "is_active", "value", "value_type"):
            continue
        setattr(discount, field, value)
    _check_dates(discount)
    await db.commit()
    await db.refresh(discount)
    return _discount_response(discount)


@router.delete("/my-store/discounts/{discount_id}", response_model=OkResponse)
async def delete_discount(
    discount_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a discount. Orders keep the code they were placed with."""
    discount = await _get_discount(db, store, discount_id)
    await db.delete(discount)
    await db.commit()
    return OkResponse()
