"""Unit tests for the Kaspi invoice block."""

from types import SimpleNamespace

import pytest
from services.storefront_service.services.kaspi import (
    build_kaspi_block,
    is_kaspi_available,
    payment_instructions,
)


def _settings(**overrides):
    defaults = {
        "kaspi_enabled": True,
        "kaspi_pay_url": "https://pay.kaspi.kz/pay/abc",
        "kaspi_recipient_name": "Алия К.",
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


@pytest.mark.unit
def test_kaspi_needs_both_flag_and_link():
    assert is_kaspi_available(_settings())
    assert not is_kaspi_available(_settings(kaspi_enabled=False))
    assert not is_kaspi_available(_settings(kaspi_pay_url=None))
    assert not is_kaspi_available(None)


@pytest.mark.unit
def test_instructions_mention_amount_and_recipient():
    steps = payment_instructions(12500, "Алия К.")

    assert "Проверьте сумму: 12 500 ₸" in steps
    assert "Убедитесь, что получатель: Алия К." in steps


@pytest.mark.unit
def test_instructions_skip_recipient_when_unknown():
    steps = payment_instructions(1000)

    assert not any("получатель" in step for step in steps)


@pytest.mark.unit
def test_block_for_invoice():
    block = build_kaspi_block(_settings(), 1500)

    assert block["payUrl"] == "https://pay.kaspi.kz/pay/abc"
    assert block["amountFormatted"] == "1 500 ₸"
    assert block["recipientName"] == "Алия К."


@pytest.mark.unit
def test_no_block_when_unavailable():
    assert build_kaspi_block(_settings(kaspi_enabled=False), 1500) is None
