"""WhatsApp order-message templating and deep links.

Store owners edit a template with ``{token}`` placeholders. Rendering is plain
sequential substitution: each known token has its first occurrence replaced,
in a fixed order, with no escaping. A token used twice keeps its second
occurrence literally, and unknown ``{...}`` text is left alone.
"""

from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote

from libs.common.currency import CURRENCY_SIGN, format_amount, format_price
from services.storefront_service.services.phone import extract_digits

TEMPLATE_TOKENS = (
    "{store_name}",
    "{customer_name}",
    "{customer_phone}",
    "{address}",
    "{comment}",
    "{items}",
    "{total}",
)

WA_ME_URL = "https://wa.me"
EMPTY_FIELD = "—"

# Fixed order shown in the admin template preview
PREVIEW_SAMPLE = {
    "{customer_name}": "Алия Нурланова",
    "{customer_phone}": "+7 777 123 45 67",
    "{address}": "ул. Абая 1, кв 10",
    "{comment}": "Побыстрее, пожалуйста",
    "{items}": "1x Товар A - 5 000 ₸\n2x Товар B - 3 000 ₸",
    "{total}": "11 000",
}
PREVIEW_STORE_NAME = "Магазин"


def format_item_line(quantity: int, name: str, amount: int) -> str:
    """``2x Лепёшка - 1 000 ₸``"""
    return f"{quantity}x {name} - {format_amount(amount)} {CURRENCY_SIGN}"


def format_items(items: Iterable[Mapping[str, Any]]) -> str:
    """One line per order item; the amount is unit price times quantity."""
    return "\n".join(
        format_item_line(
            item["quantity"], item["name"], item["price"] * item["quantity"]
        )
        for item in items
    )


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Replace the first occurrence of each known token, in token order."""
    rendered = template
    for token in TEMPLATE_TOKENS:
        if token in values:
            rendered = rendered.replace(token, values[token], 1)
    return rendered


def order_template_values(
    store_name: str,
    customer_name: str,
    customer_phone: str,
    items: Iterable[Mapping[str, Any]],
    total: int,
    address: Optional[str] = None,
    comment: Optional[str] = None,
) -> dict[str, str]:
    return {
        "{store_name}": store_name,
        "{customer_name}": customer_name,
        "{customer_phone}": customer_phone,
        "{address}": address or EMPTY_FIELD,
        "{comment}": comment or EMPTY_FIELD,
        "{items}": format_items(items),
        "{total}": format_amount(total),
    }


def render_order_message(template: str, store_name: str, order) -> str:
    """Render a store's template against a saved order."""
    return render_template(
        template,
        order_template_values(
            store_name=store_name,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            items=order.items,
            total=order.total,
            address=order.customer_address,
            comment=order.customer_comment,
        ),
    )


def render_preview(template: str, store_name: Optional[str] = None) -> str:
    values = {"{store_name}": store_name or PREVIEW_STORE_NAME, **PREVIEW_SAMPLE}
    return render_template(template, values)


def append_invoice_link(message: str, invoice_url: str) -> str:
    return f"{message}\n\nСмотреть счёт:\n{invoice_url}"


def build_whatsapp_link(phone: str, text: Optional[str] = None) -> str:
    """``https://wa.me/<digits>?text=<url-encoded text>``"""
    url = f"{WA_ME_URL}/{extract_digits(phone)}"
    if text:
        url += "?text=" + quote(text, safe="")
    return url


def order_notification_text(order_number: int, customer_name: str, total: int) -> str:
    """Short owner alert sent through the WhatsApp Business API."""
    return (
        f"*Новый заказ #{order_number}*\n\n"
        f"Покупатель: {customer_name}\n"
        f"Сумма: {format_price(total)}\n\n"
        "Откройте панель управления для подробностей."
    )
