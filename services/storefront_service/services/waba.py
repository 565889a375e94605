"""
WhatsApp Business API (360dialog) notifications.

The platform account is configured by the superadmin and stored in the
``waba_config`` platform setting. Every send attempt, successful or not, is
recorded in ``whatsapp_messages`` so the console can show delivery stats.
Sends are best effort: failures are logged and recorded, never raised.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.storefront_service.models import (
    Customer,
    MessageStatus,
    MessageType,
    WhatsappMessage,
)
from services.storefront_service.services.phone import extract_digits
from services.storefront_service.services.platform_settings import (
    WABA_CONFIG_KEY,
    get_platform_setting,
    set_platform_setting,
)
from services.storefront_service.services.whatsapp_message import (
    order_notification_text,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

NOT_CONFIGURED_ERROR = "WABA not configured"


@dataclass
class WabaConfig:
    api_key: Optional[str] = None
    sender_phone: Optional[str] = None
    order_notification_template: str = "order_notification"
    broadcast_template: str = "broadcast_message"
    enabled: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.enabled and self.api_key)

    @classmethod
    def from_setting(cls, value: Optional[dict]) -> "WabaConfig":
        value = value or {}
        defaults = cls()
        return cls(
            api_key=value.get("apiKey") or None,
            sender_phone=value.get("senderPhone") or None,
            order_notification_template=value.get("orderNotificationTemplate")
            or defaults.order_notification_template,
            broadcast_template=value.get("broadcastTemplate")
            or defaults.broadcast_template,
            enabled=bool(value.get("enabled", False)),
        )

    def to_setting(self) -> dict:
        return {
            "apiKey": self.api_key,
            "senderPhone": self.sender_phone,
            "orderNotificationTemplate": self.order_notification_template,
            "broadcastTemplate": self.broadcast_template,
            "enabled": self.enabled,
        }

    def to_public(self) -> dict:
        """Config as shown in the console; the key is masked."""
        data = self.to_setting()
        data["apiKey"] = mask_api_key(self.api_key)
        data["isConfigured"] = self.is_configured
        return data


def mask_api_key(api_key: Optional[str]) -> Optional[str]:
    if not api_key:
        return None
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:4]}...{api_key[-4:]}"


async def get_waba_config(db: AsyncSession) -> WabaConfig:
    return WabaConfig.from_setting(await get_platform_setting(db, WABA_CONFIG_KEY))


async def save_waba_config(db: AsyncSession, updates: dict) -> WabaConfig:
    """Merge ``updates`` (camelCase setting keys) into the stored config.

    A missing or empty ``apiKey`` keeps the stored key. Caller commits.
    """
    current = (await get_platform_setting(db, WABA_CONFIG_KEY)) or {}
    merged = {**current, **{k: v for k, v in updates.items() if v is not None}}
    if not updates.get("apiKey"):
        merged["apiKey"] = current.get("apiKey")
    await set_platform_setting(db, WABA_CONFIG_KEY, merged)
    return WabaConfig.from_setting(merged)


class WabaClient:
    """Thin async client for the 360dialog messages endpoint."""

    def __init__(
        self, api_key: str, api_url: Optional[str] = None, timeout: float = 15.0
    ):
        self.api_key = api_key
        self.api_url = api_url or get_settings().WABA_API_URL
        self.timeout = timeout

    async def send_text(self, to: str, body: str) -> str:
        """Send a text message; returns the message id (wamid).

        Raises:
            RuntimeError: when the API rejects or cannot be reached
        """
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": extract_digits(to),
            "type": "text",
            "text": {"body": body},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={
                        "D360-API-KEY": self.api_key,
                        "Content-Type": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise RuntimeError(f"WABA unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            error = (data.get("error") or {}).get("message") or response.text
            raise RuntimeError(f"WABA error ({response.status_code}): {error}")

        messages = data.get("messages") or []
        if not messages or not messages[0].get("id"):
            raise RuntimeError("WABA response has no message id")
        return messages[0]["id"]


async def send_text_message(
    db: AsyncSession,
    to: str,
    body: str,
    store_id: Optional[int] = None,
    message_type: MessageType = MessageType.TEXT,
    config: Optional[WabaConfig] = None,
) -> WhatsappMessage:
    """Send a message and record the attempt. Caller commits."""
    config = config or await get_waba_config(db)
    message = WhatsappMessage(
        store_id=store_id,
        recipient_phone=extract_digits(to),
        message_type=message_type,
        content=body,
        status=MessageStatus.PENDING,
    )
    db.add(message)

    if not config.is_configured:
        message.status = MessageStatus.FAILED
        message.error_message = NOT_CONFIGURED_ERROR
        await db.flush()
        return message

    try:
        wamid = await WabaClient(config.api_key).send_text(to, body)
    except RuntimeError as e:
        logger.error(f"WhatsApp send to {message.recipient_phone} failed: {e}")
        message.status = MessageStatus.FAILED
        message.error_message = str(e)
    else:
        message.status = MessageStatus.SENT
        message.wamid = wamid

    await db.flush()
    return message


async def send_order_notification(db: AsyncSession, store, order) -> WhatsappMessage:
    """Tell the store owner a new order arrived."""
    body = order_notification_text(
        order.order_number, order.customer_name, order.total
    )
    return await send_text_message(
        db,
        to=store.whatsapp_phone,
        body=body,
        store_id=store.id,
        message_type=MessageType.ORDER_NOTIFICATION,
    )


async def list_messages(
    db: AsyncSession, limit: int = 50, store_id: Optional[int] = None
) -> list[WhatsappMessage]:
    query = select(WhatsappMessage)
    if store_id is not None:
        query = query.where(WhatsappMessage.store_id == store_id)
    result = await db.execute(
        query.order_by(WhatsappMessage.created_at.desc(), WhatsappMessage.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def message_stats(db: AsyncSession) -> dict:
    result = await db.execute(
        select(WhatsappMessage.status, func.count()).group_by(WhatsappMessage.status)
    )
    counts = {MessageStatus(row[0]): row[1] for row in result.all()}
    return {
        "total": sum(counts.values()),
        "sent": counts.get(MessageStatus.SENT, 0),
        "failed": counts.get(MessageStatus.FAILED, 0),
    }


async def customer_phones(
    db: AsyncSession, store_id: Optional[int] = None
) -> list[tuple[Optional[int], str]]:
    """Distinct recipient phones, paired with the store they are logged under.

    Platform-wide, a phone shared by customers of several stores is listed
    once, with no store.
    """
    has_phone = (Customer.phone.is_not(None), Customer.phone != "")
    if store_id is None:
        result = await db.execute(
            select(Customer.phone).where(*has_phone).distinct().order_by(Customer.phone)
        )
        return [(None, phone) for phone in result.scalars().all()]

    result = await db.execute(
        select(Customer.phone)
        .where(Customer.store_id == store_id, *has_phone)
        .distinct()
        .order_by(Customer.phone)
    )
    return [(store_id, phone) for phone in result.scalars().all()]


async def broadcast_to_customers(
    db: AsyncSession, message: str, store_id: Optional[int] = None
) -> dict:
    """Send one text to every customer (of one store, or platform-wide)."""
    config = await get_waba_config(db)
    recipients = await customer_phones(db, store_id)
    sent = 0
    for recipient_store_id, phone in recipients:
        row = await send_text_message(
            db, phone, message, store_id=recipient_store_id, config=config
        )
        if row.status == MessageStatus.SENT:
            sent += 1
    return {"total": len(recipients), "sent": sent, "failed": len(recipients) - sent}
