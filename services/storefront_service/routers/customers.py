"""Owner customer routes."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.db.session import get_async_db
from services.storefront_service.models import Customer, Store
from services.storefront_service.routers._helpers import get_my_store, not_found
from services.storefront_service.schemas import (
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
    OkResponse,
)
from services.storefront_service.services.phone import normalize_kz_phone
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["customers"])

CUSTOMER_NOT_FOUND = "Клиент не найден"
INVALID_PHONE = "Укажите номер телефона в формате +7 (XXX) XXX-XX-XX"


async def _get_customer(db: AsyncSession, store: Store, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer).where(
            Customer.id == customer_id, Customer.store_id == store.id
        )
    )
    customer = result.scalar_one_or_none()
    if not customer:
        raise not_found(CUSTOMER_NOT_FOUND)
    return customer


def _clean_phone(phone: Optional[str]) -> Optional[str]:
    """Reduce a phone to its 11 digits; blank stays None."""
    if not phone or not phone.strip():
        return None
    normalized = normalize_kz_phone(phone)
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_PHONE
        )
    return normalized


async def _ensure_phone_free(
    db: AsyncSession,
    store: Store,
    phone: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    """One customer record per phone within a store."""
    if not phone:
        return
    query = select(Customer.id).where(
        Customer.store_id == store.id, Customer.phone == phone
    )
    if exclude_id is not None:
        query = query.where(Customer.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Клиент с таким телефоном уже есть",
        )


@router.get("/my-store/customers", response_model=list[CustomerResponse])
async def list_customers(
    search: Optional[str] = None,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """List customers, most recent buyers first."""
    query = select(Customer).where(Customer.store_id == store.id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.where(
            or_(Customer.name.ilike(pattern), Customer.phone.ilike(pattern))
        )
    result = await db.execute(
        query.order_by(Customer.last_order_at.desc().nulls_last(), Customer.id.desc())
    )
    return result.scalars().all()


@router.post(
    "/my-store/customers",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    customer_in: CustomerCreate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a customer by hand."""
    data = customer_in.model_dump()
    data["phone"] = _clean_phone(data.get("phone"))
    await _ensure_phone_free(db, store, data["phone"])
    customer = Customer(store_id=store.id, **data)
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return customer


@router.patch("/my-store/customers/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    customer_in: CustomerUpdate,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Edit contact details and notes."""
    customer = await _get_customer(db, store, customer_id)
    update_data = customer_in.model_dump(exclude_unset=True)
    if "phone" in update_data:
        update_data["phone"] = _clean_phone(update_data["phone"])
    if update_data.get("phone"):
        await _ensure_phone_free(db, store, update_data["phone"], exclude_id=customer.id)

    for field, value in update_data.items():
        if value is None and field in ("name", "is_active"):
            continue
        setattr(customer, field, value)
    await db.commit()
    await db.refresh(customer)
    return customer


@router.delete("/my-store/customers/{customer_id}", response_model=OkResponse)
async def delete_customer(
    customer_id: int,
    store: Store = Depends(get_my_store),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a customer record. Their orders are kept."""
    customer = await _get_customer(db, store, customer_id)
    await db.delete(customer)
    await db.commit()
    return OkResponse()
