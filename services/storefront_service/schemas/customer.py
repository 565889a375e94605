"""Customer schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field
from services.storefront_service.schemas.common import CamelModel


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)


class CustomerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)
    is_active: Optional[bool] = None


class CustomerResponse(CamelModel):
    id: int
    store_id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    total_orders: int
    total_spent: int
    first_order_at: Optional[datetime] = None
    last_order_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
