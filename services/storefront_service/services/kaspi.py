"""Kaspi Pay instructions for invoices.

There is no Kaspi API: the store owner pastes a payment link generated in the
Kaspi.kz app, and the invoice page walks the buyer through paying it.
"""

from typing import Optional

from libs.common.currency import format_price


def is_kaspi_available(settings) -> bool:
    return bool(settings and settings.kaspi_enabled and settings.kaspi_pay_url)


def payment_instructions(
    amount: int, recipient_name: Optional[str] = None
) -> list[str]:
    steps = [
        "Нажмите кнопку «Оплатить через Kaspi» ниже",
        f"Проверьте сумму: {format_price(amount)}",
    ]
    if recipient_name:
        steps.append(f"Убедитесь, что получатель: {recipient_name}")
    steps.append("Подтвердите платёж в приложении Kaspi.kz")
    steps.append("Отправьте продавцу чек об оплате в WhatsApp")
    return steps


def build_kaspi_block(settings, amount: int) -> Optional[dict]:
    """Invoice payload for Kaspi, or None when Kaspi is off or unconfigured."""
    if not is_kaspi_available(settings):
        return None
    return {
        "payUrl": settings.kaspi_pay_url,
        "recipientName": settings.kaspi_recipient_name,
        "amount": amount,
        "amountFormatted": format_price(amount),
        "instructions": payment_instructions(amount, settings.kaspi_recipient_name),
    }
