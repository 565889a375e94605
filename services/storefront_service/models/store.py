"""Store tenant models: the store itself and its 1:1 configuration rows."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.storefront_service.models.enums import (
    ButtonStyle,
    CardStyle,
    FontStyle,
    Plan,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

DEFAULT_WHATSAPP_TEMPLATE = (
    "Новый заказ из {store_name}!\n\n"
    "Клиент: {customer_name}\n"
    "Телефон: {customer_phone}\n"
    "Адрес: {address}\n"
    "Комментарий: {comment}\n\n"
    "Товары:\n{items}\n\n"
    "Итого: {total} ₸"
)

DEFAULT_PRIMARY_COLOR = "#2563eb"

# Children go with their store; the database cascade does the deleting.
_CHILDREN = {"cascade": "all, delete-orphan", "passive_deletes": True}


class Store(Base):
    """A tenant: one business with its own catalog, orders and customers."""

    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    whatsapp_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    plan: Mapped[Plan] = mapped_column(
        SAEnum(Plan, values_callable=enum_values, name="store_plan_enum"),
        default=Plan.FREE,
        server_default=Plan.FREE.value,
    )
    plan_started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    plan_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    # Relationships
    # 1:1 configuration rows load with the store
    theme = relationship(
        "StoreTheme",
        uselist=False,
        lazy="selectin",
        back_populates="store",
        **_CHILDREN,
    )
    settings = relationship(
        "StoreSettings",
        uselist=False,
        lazy="selectin",
        back_populates="store",
        **_CHILDREN,
    )
    delivery = relationship(
        "DeliverySettings",
        uselist=False,
        lazy="selectin",
        back_populates="store",
        **_CHILDREN,
    )
    categories = relationship("Category", back_populates="store", **_CHILDREN)
    products = relationship("Product", back_populates="store", **_CHILDREN)
    orders = relationship("Order", back_populates="store", **_CHILDREN)
    customers = relationship("Customer", back_populates="store", **_CHILDREN)
    discounts = relationship("Discount", back_populates="store", **_CHILDREN)
    events = relationship("StoreEvent", back_populates="store", **_CHILDREN)

    def __repr__(self):
        return f"<Store {self.slug}>"


class StoreTheme(Base):
    """Branding for the public storefront."""

    __tablename__ = "store_themes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), unique=True
    )
    primary_color: Mapped[str] = mapped_column(
        String(7), default=DEFAULT_PRIMARY_COLOR, server_default=DEFAULT_PRIMARY_COLOR
    )
    secondary_color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_overlay: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    button_style: Mapped[ButtonStyle] = mapped_column(
        SAEnum(ButtonStyle, values_callable=enum_values, name="button_style_enum"),
        default=ButtonStyle.PILL,
    )
    card_style: Mapped[CardStyle] = mapped_column(
        SAEnum(CardStyle, values_callable=enum_values, name="card_style_enum"),
        default=CardStyle.BORDERED,
    )
    font_style: Mapped[FontStyle] = mapped_column(
        SAEnum(FontStyle, values_callable=enum_values, name="font_style_enum"),
        default=FontStyle.MODERN,
    )

    store = relationship("Store", back_populates="theme")


class StoreSettings(Base):
    """Storefront behaviour, WhatsApp template and Kaspi payment link."""

    __tablename__ = "store_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), unique=True
    )
    show_prices: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    currency: Mapped[str] = mapped_column(String(5), default="KZT")
    whatsapp_template: Mapped[str] = mapped_column(
        Text, default=DEFAULT_WHATSAPP_TEMPLATE, nullable=False
    )
    instagram_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    checkout_address_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    checkout_comment_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )

    # Kaspi Pay (manual link, no API)
    kaspi_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    kaspi_pay_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kaspi_recipient_name: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )

    store = relationship("Store", back_populates="settings")


class DeliverySettings(Base):
    """Pickup/delivery toggles, fees and the single stored pickup address."""

    __tablename__ = "delivery_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), unique=True
    )
    pickup_enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    delivery_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    delivery_fee: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    delivery_free_threshold: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )
    pickup_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    delivery_zone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pickup_coordinates: Mapped[Optional[list]] = mapped_column(
        JSON, nullable=True
    )  # [lon, lat] as Yandex expects

    store = relationship("Store", back_populates="delivery")
