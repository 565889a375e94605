"""Category and product schemas."""

from typing import Optional

from pydantic import Field
from services.storefront_service.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryResponse(CamelModel):
    id: int
    store_id: int
    name: str
    sort_order: int
    is_active: bool


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: int = Field(..., ge=0)
    discount_price: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0
    image_urls: list[str] = Field(default_factory=list)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[int] = Field(None, ge=0)
    discount_price: Optional[int] = Field(None, ge=0)
    category_id: Optional[int] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None
    image_urls: Optional[list[str]] = None


class ProductResponse(CamelModel):
    id: int
    store_id: int
    category_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    price: int
    discount_price: Optional[int] = None
    is_active: bool
    sort_order: int
    image_urls: list[str]
