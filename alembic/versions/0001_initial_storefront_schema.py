"""initial_storefront_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

DEFAULT_WHATSAPP_TEMPLATE = (
    "Новый заказ из {store_name}!\n\n"
    "Клиент: {customer_name}\n"
    "Телефон: {customer_phone}\n"
    "Адрес: {address}\n"
    "Комментарий: {comment}\n\n"
    "Товары:\n{items}\n\n"
    "Итого: {total} ₸"
)


def _store_fk() -> sa.Column:
    return sa.Column(
        "store_id",
        sa.Integer(),
        sa.ForeignKey("stores.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade schema - Create all storefront tables."""

    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("profile_image_url", sa.Text(), nullable=True),
        sa.Column(
            "is_super_admin", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "password_reset_codes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("code", sa.String(6), nullable=False),
        sa.Column("used", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_password_reset_codes_user_id", "password_reset_codes", ["user_id"]
    )
    op.create_index("ix_password_reset_codes_email", "password_reset_codes", ["email"])

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "owner_user_id",
            sa.String(64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True),
        sa.Column("whatsapp_phone", sa.String(20), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("business_type", sa.String(50), nullable=True),
        sa.Column(
            "plan",
            sa.Enum("free", "pro", "business", name="store_plan_enum"),
            server_default="free",
            nullable=False,
        ),
        sa.Column("plan_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("plan_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_stores_owner_user_id", "stores", ["owner_user_id"])

    op.create_table(
        "store_themes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "store_id",
            sa.Integer(),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "primary_color", sa.String(7), server_default="#2563eb", nullable=False
        ),
        sa.Column("secondary_color", sa.String(7), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        sa.Column("banner_url", sa.Text(), nullable=True),
        sa.Column(
            "banner_overlay", sa.Boolean(), server_default="true", nullable=False
        ),
        sa.Column(
            "button_style",
            sa.Enum("pill", "rounded", "square", name="button_style_enum"),
            nullable=False,
        ),
        sa.Column(
            "card_style",
            sa.Enum("bordered", "shadow", "flat", name="card_style_enum"),
            nullable=False,
        ),
        sa.Column(
            "font_style",
            sa.Enum("modern", "classic", "rounded", name="font_style_enum"),
            nullable=False,
        ),
    )

    op.create_table(
        "store_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "store_id",
            sa.Integer(),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("show_prices", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("currency", sa.String(5), nullable=False),
        sa.Column(
            "whatsapp_template",
            sa.Text(),
            server_default=DEFAULT_WHATSAPP_TEMPLATE,
            nullable=False,
        ),
        sa.Column("instagram_url", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.Text(), nullable=True),
        sa.Column(
            "checkout_address_enabled",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.Column(
            "checkout_comment_enabled",
            sa.Boolean(),
            server_default="false",
            nullable=False,
        ),
        sa.Column(
            "kaspi_enabled", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column("kaspi_pay_url", sa.Text(), nullable=True),
        sa.Column("kaspi_recipient_name", sa.String(200), nullable=True),
    )

    op.create_table(
        "delivery_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "store_id",
            sa.Integer(),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "pickup_enabled", sa.Boolean(), server_default="true", nullable=False
        ),
        sa.Column(
            "delivery_enabled", sa.Boolean(), server_default="false", nullable=False
        ),
        sa.Column("delivery_fee", sa.Integer(), nullable=True),
        sa.Column("delivery_free_threshold", sa.Integer(), nullable=True),
        sa.Column("pickup_address", sa.Text(), nullable=True),
        sa.Column("delivery_zone", sa.Text(), nullable=True),
        sa.Column("pickup_coordinates", sa.JSON(), nullable=True),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
    )
    op.create_index("ix_categories_store_id", "categories", ["store_id"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("discount_price", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("sort_order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("image_urls", sa.JSON(), nullable=False),
    )
    op.create_index("ix_products_store_sort", "products", ["store_id", "sort_order"])

    op.create_table(
        "discounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column(
            "type",
            sa.Enum(
                "code",
                "order_amount",
                "automatic",
                "bundle",
                "buy_x_get_y",
                "free_delivery",
                name="discount_type_enum",
            ),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("code", sa.String(50), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column(
            "value_type",
            sa.Enum("percentage", "fixed", "free", name="discount_value_type_enum"),
            nullable=False,
        ),
        sa.Column("value", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "applies_to",
            sa.Enum(
                "orders", "products", "categories", name="discount_applies_to_enum"
            ),
            nullable=False,
        ),
        sa.Column("target_product_ids", sa.JSON(), nullable=False),
        sa.Column("target_category_ids", sa.JSON(), nullable=False),
        sa.Column("buy_product_ids", sa.JSON(), nullable=False),
        sa.Column("get_product_ids", sa.JSON(), nullable=False),
        sa.Column(
            "min_requirement",
            sa.Enum("none", "amount", "quantity", name="min_requirement_enum"),
            nullable=False,
        ),
        sa.Column("min_value", sa.Integer(), nullable=True),
        sa.Column("max_total_uses", sa.Integer(), nullable=True),
        sa.Column("max_per_customer", sa.Integer(), nullable=True),
        sa.Column("max_total_amount", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("usage_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "total_discounted", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_discounts_store_id", "discounts", ["store_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column("order_number", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(200), nullable=False),
        sa.Column("customer_phone", sa.String(30), nullable=False),
        sa.Column("customer_address", sa.Text(), nullable=True),
        sa.Column("customer_comment", sa.Text(), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("subtotal", sa.Integer(), nullable=False),
        sa.Column(
            "discount_amount", sa.Integer(), server_default="0", nullable=False
        ),
        sa.Column("delivery_fee", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("discount_code", sa.String(50), nullable=True),
        sa.Column(
            "discount_id",
            sa.Integer(),
            sa.ForeignKey("discounts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "payment_method",
            sa.Enum("whatsapp", "kaspi", "cash", name="payment_method_enum"),
            nullable=True,
        ),
        sa.Column(
            "fulfillment_type",
            sa.Enum("pickup", "delivery", name="fulfillment_type_enum"),
            nullable=True,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "confirmed",
                "completed",
                "cancelled",
                name="order_status_enum",
            ),
            server_default="pending",
            nullable=False,
        ),
        sa.Column(
            "payment_status",
            sa.Enum(
                "unpaid",
                "confirming",
                "partially_paid",
                "paid",
                "refunded",
                "voided",
                name="payment_status_enum",
            ),
            server_default="unpaid",
            nullable=False,
        ),
        sa.Column(
            "fulfillment_status",
            sa.Enum(
                "unfulfilled",
                "partially_fulfilled",
                "fulfilled",
                name="fulfillment_status_enum",
            ),
            server_default="unfulfilled",
            nullable=False,
        ),
        sa.Column("internal_note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "store_id", "order_number", name="uq_orders_store_number"
        ),
    )
    op.create_index("ix_orders_store_id", "orders", ["store_id"])
    op.create_index("ix_orders_created_at", "orders", ["created_at"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        sa.Column("total_orders", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_spent", sa.Integer(), server_default="0", nullable=False),
        sa.Column("first_order_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_order_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_customers_store_phone", "customers", ["store_id", "phone"])

    op.create_table(
        "store_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _store_fk(),
        sa.Column(
            "event_type",
            sa.Enum(
                "visit", "add_to_cart", "checkout_click", name="store_event_enum"
            ),
            nullable=False,
        ),
        sa.Column("meta_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_store_events_store", "store_events", ["store_id", "event_type"]
    )
    op.create_index("ix_store_events_created_at", "store_events", ["created_at"])

    op.create_table(
        "platform_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(100), nullable=False, unique=True),
        sa.Column("value", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "email_broadcasts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("subject", sa.String(300), nullable=False),
        sa.Column("html_content", sa.Text(), nullable=False),
        sa.Column("recipient_count", sa.Integer(), nullable=False),
        sa.Column("success_count", sa.Integer(), nullable=False),
        sa.Column("fail_count", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "sending", "completed", "failed", name="broadcast_status_enum"
            ),
            nullable=False,
        ),
        sa.Column("sent_by", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "whatsapp_messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "store_id",
            sa.Integer(),
            sa.ForeignKey("stores.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("recipient_phone", sa.String(30), nullable=False),
        sa.Column(
            "message_type",
            sa.Enum(
                "text",
                "template",
                "order_notification",
                name="wa_message_type_enum",
            ),
            nullable=False,
        ),
        sa.Column("template_name", sa.String(100), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "sent", "failed", name="wa_message_status_enum"),
            nullable=False,
        ),
        sa.Column("wamid", sa.String(200), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_whatsapp_messages_created_at", "whatsapp_messages", ["created_at"]
    )


def downgrade() -> None:
    """Downgrade schema - Drop all storefront tables and enum types."""
    for table in (
        "whatsapp_messages",
        "email_broadcasts",
        "platform_settings",
        "store_events",
        "customers",
        "orders",
        "discounts",
        "products",
        "categories",
        "delivery_settings",
        "store_settings",
        "store_themes",
        "stores",
        "password_reset_codes",
        "users",
    ):
        op.drop_table(table)

    for enum_name in (
        "wa_message_status_enum",
        "wa_message_type_enum",
        "broadcast_status_enum",
        "store_event_enum",
        "fulfillment_status_enum",
        "payment_status_enum",
        "order_status_enum",
        "fulfillment_type_enum",
        "payment_method_enum",
        "min_requirement_enum",
        "discount_applies_to_enum",
        "discount_value_type_enum",
        "discount_type_enum",
        "font_style_enum",
        "card_style_enum",
        "button_style_enum",
        "store_plan_enum",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
