"""Unit tests for pickup address composition and parsing."""

import pytest
from services.storefront_service.services.address import (
    AddressParts,
    build_address,
    parse_address,
)

FULL_ADDRESS = "Алматы, ул. Абая 1, кв/офис 12, этаж 3, домофон 12К, Вход со двора"


@pytest.mark.unit
def test_parse_full_address():
    """Prefixed tokens go to their fields, the rest are positional."""
    parts = parse_address(FULL_ADDRESS)

    assert parts.city == "Алматы"
    assert parts.street == "ул. Абая 1"
    assert parts.apartment == "12"
    assert parts.floor == "3"
    assert parts.intercom == "12К"
    assert parts.comment == "Вход со двора"


@pytest.mark.unit
def test_build_skips_empty_parts():
    assert build_address(AddressParts(city="Алматы", floor="2")) == "Алматы, этаж 2"
    assert build_address(AddressParts()) == ""


@pytest.mark.unit
def test_build_then_parse_keeps_canonical_order():
    parts = AddressParts(
        city="Астана",
        street="пр. Мангилик Ел 55",
        apartment="4",
        intercom="4В",
        comment="Позвонить заранее",
    )

    address = build_address(parts)

    assert address == (
        "Астана, пр. Мангилик Ел 55, кв/офис 4, домофон 4В, Позвонить заранее"
    )
    assert parse_address(address) == parts


@pytest.mark.unit
def test_parse_empty_address():
    assert parse_address(None) == AddressParts()
    assert parse_address("  ,  ") == AddressParts()


@pytest.mark.unit
def test_parse_is_positional_for_unprefixed_tokens():
    """Street-first strings land in the wrong fields; the parse is lossy."""
    parts = parse_address("ул. Абая, 1, Алматы")

    assert parts.city == "ул. Абая"
    assert parts.street == "1"
    assert parts.comment == "Алматы"


@pytest.mark.unit
def test_prefixed_tokens_can_appear_anywhere():
    parts = parse_address("этаж 5, Шымкент, ул. Тауке хана 10")

    assert parts.floor == "5"
    assert parts.city == "Шымкент"
    assert parts.street == "ул. Тауке хана 10"
