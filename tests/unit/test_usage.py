"""Unit tests for plan limits, tariffs and the upgrade banner."""

import pytest
from services.storefront_service.models import Plan
from services.storefront_service.services.usage import (
    BannerLevel,
    UsageSnapshot,
    banner_level,
    is_at_limit,
    limits_from_tariffs,
    tariff_card,
    usage_percent,
)


def _snapshot(plan=Plan.FREE, products=0, orders=0, images=0, **limits):
    return UsageSnapshot(
        plan=plan,
        products=products,
        product_limit=limits.get("product_limit", 30),
        monthly_orders=orders,
        order_limit=limits.get("order_limit", 100),
        total_images=images,
        image_limit=limits.get("image_limit", 150),
    )


@pytest.mark.unit
def test_usage_percent():
    assert usage_percent(15, 30) == 50.0
    assert usage_percent(5, -1) is None
    assert usage_percent(5, 0) is None


@pytest.mark.unit
def test_unlimited_never_gates():
    assert is_at_limit(10_000, -1) is False
    assert is_at_limit(30, 30) is True
    assert is_at_limit(29, 30) is False


@pytest.mark.unit
def test_banner_is_promo_below_half():
    assert banner_level(_snapshot(products=14, orders=49, images=74)) is BannerLevel.PROMO


@pytest.mark.unit
def test_banner_is_warning_from_half_to_limit():
    assert banner_level(_snapshot(products=15)) is BannerLevel.WARNING
    assert banner_level(_snapshot(orders=99)) is BannerLevel.WARNING


@pytest.mark.unit
def test_banner_is_critical_at_any_limit():
    assert banner_level(_snapshot(images=150)) is BannerLevel.CRITICAL
    assert banner_level(_snapshot(products=31)) is BannerLevel.CRITICAL


@pytest.mark.unit
def test_paid_plans_get_no_banner():
    snapshot = _snapshot(plan=Plan.PRO, products=300, product_limit=300)

    assert banner_level(snapshot) is None


@pytest.mark.unit
def test_unlimited_metrics_are_ignored_by_banner():
    snapshot = _snapshot(orders=10_000, order_limit=-1, image_limit=-1)

    assert banner_level(snapshot) is BannerLevel.PROMO


@pytest.mark.unit
def test_default_limits():
    free = limits_from_tariffs(Plan.FREE)
    business = limits_from_tariffs(Plan.BUSINESS)

    assert (free.products, free.monthly_orders, free.images) == (30, 100, 150)
    assert (business.products, business.monthly_orders) == (2000, -1)


@pytest.mark.unit
def test_tariff_overrides_apply_per_plan():
    overrides = {"free": {"productLimit": 50, "orderLimit": -1}}

    free = limits_from_tariffs(Plan.FREE, overrides)
    pro = limits_from_tariffs(Plan.PRO, overrides)

    assert free.products == 50
    assert free.monthly_orders == -1
    assert free.images == 150
    assert pro.products == 300


@pytest.mark.unit
def test_legacy_limit_key_is_read_as_product_limit():
    assert limits_from_tariffs(Plan.FREE, {"free": {"limit": 40}}).products == 40


@pytest.mark.unit
def test_tariff_card():
    card = tariff_card(Plan.PRO)

    assert card["plan"] == "pro"
    assert card["name"] == "Профессиональный"
    assert card["price"] == 4990
    assert card["productLimit"] == 300
    assert card["orderLimit"] == -1
    assert "Кастомный домен" in card["features"]


@pytest.mark.unit
def test_tariff_card_with_override():
    card = tariff_card(Plan.FREE, {"free": {"price": 990, "name": "Старт"}})

    assert card["price"] == 990
    assert card["name"] == "Старт"
    assert card["productLimit"] == 30
