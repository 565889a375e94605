"""Discount schemas. One shape for all six discount types."""

from datetime import datetime
from typing import Optional

from pydantic import Field
from services.storefront_service.models.enums import (
    DiscountAppliesTo,
    DiscountType,
    DiscountValueType,
    MinRequirement,
)
from services.storefront_service.schemas.common import CamelModel


class DiscountCreate(CamelModel):
    type: DiscountType
    title: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    is_active: bool = True
    value_type: DiscountValueType = DiscountValueType.PERCENTAGE
    value: int = Field(0, ge=0)
    applies_to: DiscountAppliesTo = DiscountAppliesTo.ORDERS
    target_product_ids: list[int] = Field(default_factory=list)
    target_category_ids: list[int] = Field(default_factory=list)
    buy_product_ids: list[int] = Field(default_factory=list)
    get_product_ids: list[int] = Field(default_factory=list)
    min_requirement: MinRequirement = MinRequirement.NONE
    min_value: Optional[int] = Field(None, ge=0)
    max_total_uses: Optional[int] = Field(None, ge=0)
    max_per_customer: Optional[int] = Field(None, ge=0)
    max_total_amount: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DiscountUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
    value_type: Optional[DiscountValueType] = None
    value: Optional[int] = Field(None, ge=0)
    applies_to: Optional[DiscountAppliesTo] = None
    target_product_ids: Optional[list[int]] = None
    target_category_ids: Optional[list[int]] = None
    buy_product_ids: Optional[list[int]] = None
    get_product_ids: Optional[list[int]] = None
    min_requirement: Optional[MinRequirement] = None
    min_value: Optional[int] = Field(None, ge=0)
    max_total_uses: Optional[int] = Field(None, ge=0)
    max_per_customer: Optional[int] = Field(None, ge=0)
    max_total_amount: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DiscountResponse(CamelModel):
    id: int
    store_id: int
    type: DiscountType
    type_label: str = ""
    title: str
    code: Optional[str] = None
    is_active: bool
    value_type: DiscountValueType
    value: int
    value_label: str = ""
    applies_to: DiscountAppliesTo
    target_product_ids: list[int]
    target_category_ids: list[int]
    buy_product_ids: list[int]
    get_product_ids: list[int]
    min_requirement: MinRequirement
    min_value: Optional[int] = None
    max_total_uses: Optional[int] = None
    max_per_customer: Optional[int] = None
    max_total_amount: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_count: int
    total_discounted: int
    created_at: Optional[datetime] = None
